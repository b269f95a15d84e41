"""
IAM Role Table Module.

This module defines the aws_iam_role table. ListRoles returns most role
attributes; tags, permissions boundary and last-used data come from GetRole,
and inline policies are fetched concurrently per role.
"""

from typing import Any, Dict, Iterator, List, Optional

from ...utils import api_error_handler
from ..common import aws_columns, resource_interface_description
from ..hydrate import HydrateContext, fan_out
from ..items import IamRole
from ..schema import Column, GetConfig, HydrateConfig, ListConfig, TableDefinition
from ..transforms import ColumnType, Transform, arn_to_akas, parse_policy_document, tag_list_to_dict
from ..types import IAMClient


def role_from_key(ctx: HydrateContext) -> IamRole:
    return IamRole({"RoleName": ctx.quals["name"]})


@api_error_handler
def list_iam_roles(ctx: HydrateContext) -> Iterator[IamRole]:
    paginator = ctx.client("iam").get_paginator("list_roles")
    for page in paginator.paginate():
        for role in page.get("Roles", []):
            yield IamRole(role)


@api_error_handler
def get_iam_role(ctx: HydrateContext) -> Optional[IamRole]:
    role: IamRole = ctx.item  # type: ignore[assignment]
    response = ctx.client("iam").get_role(RoleName=role.role_name)
    return IamRole(response["Role"])


@api_error_handler
def get_iam_role_data(ctx: HydrateContext) -> Dict[str, Any]:
    role: IamRole = ctx.item  # type: ignore[assignment]
    role_data = ctx.client("iam").get_role(RoleName=role.role_name)["Role"]

    boundary = role_data.get("PermissionsBoundary") or {}
    last_used = role_data.get("RoleLastUsed") or {}
    tags = role_data.get("Tags")
    return {
        "TagsSrc": tags,
        "Tags": tag_list_to_dict(tags),
        "PermissionsBoundaryArn": boundary.get("PermissionsBoundaryArn"),
        "PermissionsBoundaryType": boundary.get("PermissionsBoundaryType"),
        "RoleLastUsedDate": last_used.get("LastUsedDate"),
        "RoleLastUsedRegion": last_used.get("Region"),
    }


@api_error_handler
def get_iam_role_attached_policies(ctx: HydrateContext) -> List[str]:
    role: IamRole = ctx.item  # type: ignore[assignment]
    paginator = ctx.client("iam").get_paginator("list_attached_role_policies")
    return [
        policy["PolicyArn"]
        for page in paginator.paginate(RoleName=role.role_name)
        for policy in page.get("AttachedPolicies", [])
    ]


@api_error_handler
def list_iam_role_inline_policies(ctx: HydrateContext) -> List[str]:
    role: IamRole = ctx.item  # type: ignore[assignment]
    paginator = ctx.client("iam").get_paginator("list_role_policies")
    return [
        name
        for page in paginator.paginate(RoleName=role.role_name)
        for name in page.get("PolicyNames", [])
    ]


def get_role_inline_policy(iam_client: IAMClient, role_name: str, policy_name: str) -> Dict[str, Any]:
    response = iam_client.get_role_policy(RoleName=role_name, PolicyName=policy_name)
    return {
        "PolicyName": response["PolicyName"],
        "PolicyDocument": parse_policy_document(response.get("PolicyDocument")),
    }


@api_error_handler
def get_iam_role_inline_policies(ctx: HydrateContext) -> List[Dict[str, Any]]:
    role: IamRole = ctx.item  # type: ignore[assignment]
    iam_client = ctx.client("iam")
    return fan_out(
        lambda policy_name: get_role_inline_policy(iam_client, role.role_name, policy_name),
        ctx.result(list_iam_role_inline_policies),
        ctx.max_workers,
    )


def table_aws_iam_role() -> TableDefinition:
    return TableDefinition(
        name="aws_iam_role",
        description="AWS IAM Role",
        get=GetConfig(
            key_columns=("name",),
            item_from_key=role_from_key,
            hydrate=get_iam_role,
        ),
        list=ListConfig(hydrate=list_iam_roles),
        hydrate_config=(
            HydrateConfig(func=get_iam_role_inline_policies, depends=(list_iam_role_inline_policies,)),
        ),
        columns=aws_columns([
            Column(
                name="name",
                type=ColumnType.STRING,
                description="The friendly name that identifies the role.",
                transform=Transform.from_field("RoleName"),
            ),
            Column(
                name="role_id",
                type=ColumnType.STRING,
                description="The stable and unique string identifying the role.",
            ),
            Column(
                name="arn",
                type=ColumnType.STRING,
                description="The Amazon Resource Name (ARN) specifying the role.",
            ),
            Column(
                name="path",
                type=ColumnType.STRING,
                description="The path to the role.",
            ),
            Column(
                name="description",
                type=ColumnType.STRING,
                description="A user-provided description of the role.",
            ),
            Column(
                name="create_date",
                type=ColumnType.TIMESTAMP,
                description="The date and time when the role was created.",
            ),
            Column(
                name="max_session_duration",
                type=ColumnType.INT,
                description="The maximum session duration (in seconds) for the specified role.",
            ),
            Column(
                name="assume_role_policy",
                type=ColumnType.JSON,
                description="The policy that grants an entity permission to assume the role.",
                transform=Transform.from_field("AssumeRolePolicyDocument").transform(parse_policy_document),
            ),
            Column(
                name="permissions_boundary_arn",
                type=ColumnType.STRING,
                description="The ARN of the policy used to set the permissions boundary for the role.",
                hydrate=get_iam_role_data,
            ),
            Column(
                name="permissions_boundary_type",
                type=ColumnType.STRING,
                description="The permissions boundary usage type that indicates what type of IAM resource "
                "is used as the permissions boundary for an entity.",
                hydrate=get_iam_role_data,
            ),
            Column(
                name="role_last_used_date",
                type=ColumnType.TIMESTAMP,
                description="Contains information about the last time that an IAM role was used.",
                hydrate=get_iam_role_data,
            ),
            Column(
                name="role_last_used_region",
                type=ColumnType.STRING,
                description="The name of the AWS Region in which the role was last used.",
                hydrate=get_iam_role_data,
            ),
            Column(
                name="inline_policies",
                type=ColumnType.JSON,
                description="A list of policy documents that are embedded as inline policies for the role.",
                hydrate=get_iam_role_inline_policies,
                transform=Transform.from_value(),
            ),
            Column(
                name="attached_policy_arns",
                type=ColumnType.JSON,
                description="A list of managed policies attached to the role.",
                hydrate=get_iam_role_attached_policies,
                transform=Transform.from_value(),
            ),
            Column(
                name="tags_src",
                type=ColumnType.JSON,
                description="A list of tags that are attached to the role.",
                hydrate=get_iam_role_data,
            ),
            # Standard columns for all tables
            Column(
                name="tags",
                type=ColumnType.JSON,
                description=resource_interface_description("tags"),
                hydrate=get_iam_role_data,
            ),
            Column(
                name="title",
                type=ColumnType.STRING,
                description=resource_interface_description("title"),
                transform=Transform.from_field("RoleName"),
            ),
            Column(
                name="akas",
                type=ColumnType.JSON,
                description=resource_interface_description("akas"),
                transform=Transform.from_field("Arn").transform(arn_to_akas),
            ),
        ]),
    )
