"""
IAM User Table Module.

This module defines the aws_iam_user table: users are listed with the
ListUsers paginator, and tags, permissions boundary, groups, attached
policies and inline policy documents are hydrated per user.
"""

from typing import Any, Dict, Iterator, List, Optional

from ...utils import api_error_handler
from ..common import aws_columns, resource_interface_description
from ..hydrate import HydrateContext, fan_out
from ..items import IamUser
from ..schema import Column, GetConfig, HydrateConfig, ListConfig, TableDefinition
from ..transforms import ColumnType, Transform, arn_to_akas, parse_policy_document, tag_list_to_dict
from ..types import IAMClient


def user_from_key(ctx: HydrateContext) -> IamUser:
    return IamUser({"UserName": ctx.quals["name"]})


@api_error_handler
def list_iam_users(ctx: HydrateContext) -> Iterator[IamUser]:
    paginator = ctx.client("iam").get_paginator("list_users")
    for page in paginator.paginate():
        for user in page.get("Users", []):
            yield IamUser(user)


@api_error_handler
def get_iam_user(ctx: HydrateContext) -> Optional[IamUser]:
    user: IamUser = ctx.item  # type: ignore[assignment]
    response = ctx.client("iam").get_user(UserName=user.user_name)
    return IamUser(response["User"])


@api_error_handler
def get_iam_user_data(ctx: HydrateContext) -> Dict[str, Any]:
    """
    Fetch the attributes ListUsers leaves out: tags and permissions boundary.

    Any error from GetUser is raised; no default row data is substituted.
    """
    user: IamUser = ctx.item  # type: ignore[assignment]
    response = ctx.client("iam").get_user(UserName=user.user_name)
    user_data = response["User"]

    boundary = user_data.get("PermissionsBoundary") or {}
    tags = user_data.get("Tags")
    return {
        "TagsSrc": tags,
        "Tags": tag_list_to_dict(tags),
        "PermissionsBoundaryArn": boundary.get("PermissionsBoundaryArn"),
        "PermissionsBoundaryType": boundary.get("PermissionsBoundaryType"),
    }


@api_error_handler
def get_iam_user_attached_policies(ctx: HydrateContext) -> List[str]:
    user: IamUser = ctx.item  # type: ignore[assignment]
    paginator = ctx.client("iam").get_paginator("list_attached_user_policies")
    policy_arns = []
    for page in paginator.paginate(UserName=user.user_name):
        for policy in page.get("AttachedPolicies", []):
            policy_arns.append(policy["PolicyArn"])
    return policy_arns


@api_error_handler
def get_iam_user_groups(ctx: HydrateContext) -> List[Dict[str, Any]]:
    user: IamUser = ctx.item  # type: ignore[assignment]
    paginator = ctx.client("iam").get_paginator("list_groups_for_user")
    groups = []
    for page in paginator.paginate(UserName=user.user_name):
        groups.extend(page.get("Groups", []))
    return groups


@api_error_handler
def list_iam_user_inline_policies(ctx: HydrateContext) -> List[str]:
    user: IamUser = ctx.item  # type: ignore[assignment]
    paginator = ctx.client("iam").get_paginator("list_user_policies")
    policy_names = []
    for page in paginator.paginate(UserName=user.user_name):
        policy_names.extend(page.get("PolicyNames", []))
    return policy_names


def get_user_inline_policy(iam_client: IAMClient, user_name: str, policy_name: str) -> Dict[str, Any]:
    """
    Fetch and decode one inline policy of a user.

    Raises:
        ClientError: If GetUserPolicy fails
        DecodeError: If the policy document is not URL-encoded JSON
    """
    response = iam_client.get_user_policy(UserName=user_name, PolicyName=policy_name)
    return {
        "PolicyName": response["PolicyName"],
        "PolicyDocument": parse_policy_document(response.get("PolicyDocument")),
    }


@api_error_handler
def get_iam_user_inline_policies(ctx: HydrateContext) -> List[Dict[str, Any]]:
    """
    Fetch every inline policy document of a user concurrently.

    Depends on list_iam_user_inline_policies for the policy names. Fails as a
    whole if any single policy cannot be fetched or decoded.
    """
    user: IamUser = ctx.item  # type: ignore[assignment]
    policy_names = ctx.result(list_iam_user_inline_policies)
    iam_client = ctx.client("iam")
    return fan_out(
        lambda policy_name: get_user_inline_policy(iam_client, user.user_name, policy_name),
        policy_names,
        ctx.max_workers,
    )


def table_aws_iam_user() -> TableDefinition:
    return TableDefinition(
        name="aws_iam_user",
        description="AWS IAM User",
        get=GetConfig(
            key_columns=("name",),
            item_from_key=user_from_key,
            hydrate=get_iam_user,
        ),
        list=ListConfig(hydrate=list_iam_users),
        hydrate_config=(
            HydrateConfig(func=get_iam_user_inline_policies, depends=(list_iam_user_inline_policies,)),
        ),
        columns=aws_columns([
            Column(
                name="name",
                type=ColumnType.STRING,
                description="The friendly name identifying the user.",
                transform=Transform.from_field("UserName"),
            ),
            Column(
                name="user_id",
                type=ColumnType.STRING,
                description="The stable and unique string identifying the user.",
            ),
            Column(
                name="path",
                type=ColumnType.STRING,
                description="The path to the user.",
            ),
            Column(
                name="arn",
                type=ColumnType.STRING,
                description="The Amazon Resource Name (ARN) that identifies the user.",
            ),
            Column(
                name="create_date",
                type=ColumnType.TIMESTAMP,
                description="The date and time, when the user was created.",
            ),
            Column(
                name="password_last_used",
                type=ColumnType.TIMESTAMP,
                description="The date and time, when the user's password was last used to sign in to an AWS website.",
            ),
            Column(
                name="permissions_boundary_arn",
                type=ColumnType.STRING,
                description="The ARN of the policy used to set the permissions boundary for the user.",
                hydrate=get_iam_user_data,
            ),
            Column(
                name="permissions_boundary_type",
                type=ColumnType.STRING,
                description="The permissions boundary usage type that indicates what type of IAM resource "
                "is used as the permissions boundary for an entity. This data type can only have a value of Policy.",
                hydrate=get_iam_user_data,
            ),
            Column(
                name="groups",
                type=ColumnType.JSON,
                description="A list of groups attached to the user.",
                hydrate=get_iam_user_groups,
                transform=Transform.from_value(),
            ),
            Column(
                name="inline_policies",
                type=ColumnType.JSON,
                description="A list of policy documents that are embedded as inline policies for the user.",
                hydrate=get_iam_user_inline_policies,
                transform=Transform.from_value(),
            ),
            Column(
                name="attached_policy_arns",
                type=ColumnType.JSON,
                description="A list of managed policies attached to the user.",
                hydrate=get_iam_user_attached_policies,
                transform=Transform.from_value(),
            ),
            Column(
                name="tags_src",
                type=ColumnType.JSON,
                description="A list of tags that are attached to the user.",
                hydrate=get_iam_user_data,
            ),
            # Standard columns for all tables
            Column(
                name="tags",
                type=ColumnType.JSON,
                description=resource_interface_description("tags"),
                hydrate=get_iam_user_data,
            ),
            Column(
                name="title",
                type=ColumnType.STRING,
                description=resource_interface_description("title"),
                transform=Transform.from_field("UserName"),
            ),
            Column(
                name="akas",
                type=ColumnType.JSON,
                description=resource_interface_description("akas"),
                transform=Transform.from_field("Arn").transform(arn_to_akas),
            ),
        ]),
    )
