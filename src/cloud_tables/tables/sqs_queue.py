"""
SQS Queue Table Module.

This module defines the aws_sqs_queue table, queried per region.

Key points:
- ListQueues only returns queue URLs; every other attribute comes from
  GetQueueAttributes, fetched once per queue by a hydrate function, or
  kept from the get call itself.
- A queue URL names its region, so a get by URL only queries that region.
- Name normalisation: the queue name is the last path segment of the URL.
- SQS returns attribute values as strings; column types coerce them.
"""

from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urlparse

from ...utils import api_error_handler
from ..common import aws_regional_columns, resource_interface_description
from ..hydrate import HydrateContext
from ..items import SqsQueue
from ..schema import Column, GetConfig, ListConfig, TableDefinition
from ..transforms import ColumnType, Transform, arn_to_akas, parse_policy_document
from ..types import Quals


def queue_name_from_url(queue_url: Optional[str]) -> Optional[str]:
    if not queue_url:
        return None
    return queue_url.rstrip("/").split("/")[-1]


def queue_from_key(ctx: HydrateContext) -> SqsQueue:
    return SqsQueue({"QueueUrl": ctx.quals["queue_url"]})


def queue_region_from_url(quals: Quals) -> Optional[str]:
    """
    Return the region named by a queue URL's host, or None if it names none.

    Handles https://sqs.<region>.amazonaws.com/... and the legacy
    https://<region>.queue.amazonaws.com/... forms.
    """
    host = urlparse(quals.get("queue_url") or "").hostname or ""
    parts = host.split(".")
    if len(parts) >= 3 and parts[0] == "sqs":
        return parts[1]
    if len(parts) >= 3 and parts[1] == "queue":
        return parts[0]
    if host == "queue.amazonaws.com":
        return "us-east-1"
    return None


@api_error_handler
def list_sqs_queues(ctx: HydrateContext) -> Iterator[SqsQueue]:
    paginator = ctx.client("sqs").get_paginator("list_queues")
    for page in paginator.paginate():
        for queue_url in page.get("QueueUrls", []):
            yield SqsQueue({"QueueUrl": queue_url})


@api_error_handler
def get_sqs_queue(ctx: HydrateContext) -> Optional[SqsQueue]:
    queue: SqsQueue = ctx.item  # type: ignore[assignment]
    # Raises AWS.SimpleQueueService.NonExistentQueue for unknown URLs
    response = ctx.client("sqs").get_queue_attributes(QueueUrl=queue.queue_url, AttributeNames=["All"])
    return SqsQueue({"QueueUrl": queue.queue_url, "Attributes": response.get("Attributes", {})})


@api_error_handler
def get_sqs_queue_attributes(ctx: HydrateContext) -> Dict[str, Any]:
    queue: SqsQueue = ctx.item  # type: ignore[assignment]
    # Items from a get already carry their attributes
    attributes = queue.get("Attributes")
    if attributes is not None:
        return dict(attributes)
    response = ctx.client("sqs").get_queue_attributes(QueueUrl=queue.queue_url, AttributeNames=["All"])
    return dict(response.get("Attributes", {}))


@api_error_handler
def list_sqs_queue_tags(ctx: HydrateContext) -> Optional[Dict[str, str]]:
    queue: SqsQueue = ctx.item  # type: ignore[assignment]
    response = ctx.client("sqs").list_queue_tags(QueueUrl=queue.queue_url)
    return response.get("Tags") or None


def _attribute(name: str, column_type: ColumnType, description: str, **kwargs: Any) -> Column:
    return Column(
        name=name,
        type=column_type,
        description=description,
        hydrate=get_sqs_queue_attributes,
        **kwargs,
    )


def table_aws_sqs_queue() -> TableDefinition:
    columns: List[Column] = [
        Column(
            name="queue_url",
            type=ColumnType.STRING,
            description="The URL of the Amazon SQS queue.",
        ),
        _attribute("queue_arn", ColumnType.STRING, "The Amazon resource name (ARN) of the queue."),
        _attribute(
            "fifo_queue",
            ColumnType.BOOL,
            "Returns true if the queue is FIFO.",
        ),
        _attribute(
            "delay_seconds",
            ColumnType.INT,
            "The default delay on the queue in seconds.",
        ),
        _attribute(
            "max_message_size",
            ColumnType.INT,
            "The limit of how many bytes a message can contain before Amazon SQS rejects it.",
            transform=Transform.from_field("MaximumMessageSize"),
        ),
        _attribute(
            "message_retention_seconds",
            ColumnType.INT,
            "The length of time, in seconds, for which Amazon SQS retains a message.",
            transform=Transform.from_field("MessageRetentionPeriod"),
        ),
        _attribute(
            "receive_wait_time_seconds",
            ColumnType.INT,
            "The length of time, in seconds, for which the ReceiveMessage action waits for a message to arrive.",
            transform=Transform.from_field("ReceiveMessageWaitTimeSeconds"),
        ),
        _attribute(
            "visibility_timeout_seconds",
            ColumnType.INT,
            "The visibility timeout for the queue in seconds.",
            transform=Transform.from_field("VisibilityTimeout"),
        ),
        _attribute(
            "content_based_deduplication",
            ColumnType.BOOL,
            "Specifies whether content-based deduplication is enabled for the queue.",
        ),
        _attribute(
            "kms_master_key_id",
            ColumnType.STRING,
            "The ID of an AWS-managed customer master key (CMK) for Amazon SQS or a custom CMK.",
            transform=Transform.from_field("KmsMasterKeyId"),
        ),
        _attribute(
            "sqs_managed_sse_enabled",
            ColumnType.BOOL,
            "Returns true if the queue is using SSE-SQS encryption with SQS-owned encryption keys.",
            transform=Transform.from_field("SqsManagedSseEnabled"),
        ),
        _attribute(
            "policy",
            ColumnType.JSON,
            "The resource IAM policy of the queue.",
            transform=Transform.from_field("Policy").transform(parse_policy_document),
        ),
        _attribute(
            "redrive_policy",
            ColumnType.JSON,
            "The string that includes the parameters for the dead-letter queue functionality.",
            transform=Transform.from_field("RedrivePolicy").transform(parse_policy_document),
        ),
        # Standard columns for all tables
        Column(
            name="tags",
            type=ColumnType.JSON,
            description=resource_interface_description("tags"),
            hydrate=list_sqs_queue_tags,
            transform=Transform.from_value(),
        ),
        Column(
            name="title",
            type=ColumnType.STRING,
            description=resource_interface_description("title"),
            transform=Transform.from_field("QueueUrl").transform(queue_name_from_url),
        ),
        _attribute(
            "akas",
            ColumnType.JSON,
            resource_interface_description("akas"),
            transform=Transform.from_field("QueueArn").transform(arn_to_akas),
        ),
    ]

    return TableDefinition(
        name="aws_sqs_queue",
        description="AWS SQS Queue",
        regional=True,
        get=GetConfig(
            key_columns=("queue_url",),
            item_from_key=queue_from_key,
            ignore_error_codes=("AWS.SimpleQueueService.NonExistentQueue",),
            region_from_key=queue_region_from_url,
            hydrate=get_sqs_queue,
        ),
        list=ListConfig(hydrate=list_sqs_queues),
        columns=aws_regional_columns(columns),
    )
