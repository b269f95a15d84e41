"""
VPC Table Module.

This module defines the aws_vpc table, queried per region. DescribeVpcs
returns everything except the ARN, which is built from the common columns.
"""

from typing import Any, Iterator, List, Optional

from ...utils import api_error_handler
from ..common import aws_regional_columns, resource_interface_description
from ..hydrate import HydrateContext
from ..items import Vpc
from ..schema import Column, GetConfig, ListConfig, TableDefinition
from ..transforms import ColumnType, Transform, tag_list_to_dict


def vpc_from_key(ctx: HydrateContext) -> Vpc:
    return Vpc({"VpcId": ctx.quals["vpc_id"]})


def vpc_title(vpc: Any) -> Optional[str]:
    """Use the Name tag when present, otherwise the VPC ID."""
    tags = tag_list_to_dict(vpc.get("Tags")) or {}
    return tags.get("Name") or vpc.get("VpcId")


@api_error_handler
def list_vpcs(ctx: HydrateContext) -> Iterator[Vpc]:
    paginator = ctx.client("ec2").get_paginator("describe_vpcs")
    for page in paginator.paginate():
        for vpc in page.get("Vpcs", []):
            yield Vpc(vpc)


@api_error_handler
def get_vpc(ctx: HydrateContext) -> Optional[Vpc]:
    vpc: Vpc = ctx.item  # type: ignore[assignment]
    response = ctx.client("ec2").describe_vpcs(VpcIds=[vpc.vpc_id])
    vpcs = response.get("Vpcs", [])
    if not vpcs:
        return None
    return Vpc(vpcs[0])


@api_error_handler
def get_vpc_akas(ctx: HydrateContext) -> List[str]:
    vpc: Vpc = ctx.item  # type: ignore[assignment]
    common = ctx.connection.common_columns()
    return [f"arn:{common['Partition']}:ec2:{ctx.region}:{common['AccountId']}:vpc/{vpc.vpc_id}"]


def table_aws_vpc() -> TableDefinition:
    return TableDefinition(
        name="aws_vpc",
        description="AWS VPC",
        regional=True,
        get=GetConfig(
            key_columns=("vpc_id",),
            item_from_key=vpc_from_key,
            ignore_error_codes=("InvalidVpcID.NotFound", "InvalidVpcID.Malformed"),
            hydrate=get_vpc,
        ),
        list=ListConfig(hydrate=list_vpcs),
        columns=aws_regional_columns([
            Column(
                name="vpc_id",
                type=ColumnType.STRING,
                description="The ID of the VPC.",
            ),
            Column(
                name="cidr_block",
                type=ColumnType.CIDR,
                description="The primary IPv4 CIDR block for the VPC.",
            ),
            Column(
                name="state",
                type=ColumnType.STRING,
                description="Contains the current state of the VPC.",
            ),
            Column(
                name="is_default",
                type=ColumnType.BOOL,
                description="Indicates whether the VPC is the default VPC.",
            ),
            Column(
                name="dhcp_options_id",
                type=ColumnType.STRING,
                description="The ID of the set of DHCP options associated with the VPC.",
            ),
            Column(
                name="instance_tenancy",
                type=ColumnType.STRING,
                description="The allowed tenancy of instances launched into the VPC.",
            ),
            Column(
                name="owner_id",
                type=ColumnType.STRING,
                description="The ID of the AWS account that owns the VPC.",
            ),
            Column(
                name="cidr_block_association_set",
                type=ColumnType.JSON,
                description="Information about the IPv4 CIDR blocks associated with the VPC.",
            ),
            Column(
                name="ipv6_cidr_block_association_set",
                type=ColumnType.JSON,
                description="Information about the IPv6 CIDR blocks associated with the VPC.",
            ),
            Column(
                name="tags_src",
                type=ColumnType.JSON,
                description="A list of tags that are attached to the VPC.",
                transform=Transform.from_field("Tags"),
            ),
            # Standard columns for all tables
            Column(
                name="title",
                type=ColumnType.STRING,
                description=resource_interface_description("title"),
                transform=Transform.from_value().transform(vpc_title),
            ),
            Column(
                name="tags",
                type=ColumnType.JSON,
                description=resource_interface_description("tags"),
                transform=Transform.from_field("Tags").transform(tag_list_to_dict),
            ),
            Column(
                name="akas",
                type=ColumnType.JSON,
                description=resource_interface_description("akas"),
                hydrate=get_vpc_akas,
                transform=Transform.from_value(),
            ),
        ]),
    )
