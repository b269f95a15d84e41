"""
SSM Maintenance Window Table Module.

This module defines the aws_ssm_maintenance_window table, queried per region.
DescribeMaintenanceWindows returns the window identities; the remaining
attributes, tags, targets and tasks are hydrated per window.
"""

from typing import Any, Dict, Iterator, List, Optional

from ...utils import api_error_handler
from ..common import aws_regional_columns, resource_interface_description
from ..hydrate import HydrateContext
from ..items import MaintenanceWindow
from ..schema import Column, GetConfig, ListConfig, TableDefinition
from ..transforms import ColumnType, Transform, tag_list_to_dict


def _window_id(ctx: HydrateContext) -> str:
    if ctx.item is not None:
        window: MaintenanceWindow = ctx.item  # type: ignore[assignment]
        return window.window_id
    return ctx.quals["window_id"]


@api_error_handler
def list_ssm_maintenance_windows(ctx: HydrateContext) -> Iterator[MaintenanceWindow]:
    paginator = ctx.client("ssm").get_paginator("describe_maintenance_windows")
    for page in paginator.paginate():
        for identity in page.get("WindowIdentities", []):
            yield MaintenanceWindow(identity)


@api_error_handler
def get_maintenance_window(ctx: HydrateContext) -> Optional[MaintenanceWindow]:
    response = ctx.client("ssm").get_maintenance_window(WindowId=_window_id(ctx))
    response.pop("ResponseMetadata", None)
    return MaintenanceWindow(response)


@api_error_handler
def get_maintenance_window_tags(ctx: HydrateContext) -> Dict[str, Any]:
    response = ctx.client("ssm").list_tags_for_resource(
        ResourceType="MaintenanceWindow",
        ResourceId=_window_id(ctx),
    )
    return {"TagList": response.get("TagList", [])}


@api_error_handler
def get_maintenance_window_targets(ctx: HydrateContext) -> List[Dict[str, Any]]:
    paginator = ctx.client("ssm").get_paginator("describe_maintenance_window_targets")
    targets: List[Dict[str, Any]] = []
    for page in paginator.paginate(WindowId=_window_id(ctx)):
        targets.extend(page.get("Targets", []))
    return targets


@api_error_handler
def get_maintenance_window_tasks(ctx: HydrateContext) -> List[Dict[str, Any]]:
    paginator = ctx.client("ssm").get_paginator("describe_maintenance_window_tasks")
    tasks: List[Dict[str, Any]] = []
    for page in paginator.paginate(WindowId=_window_id(ctx)):
        tasks.extend(page.get("Tasks", []))
    return tasks


@api_error_handler
def get_maintenance_window_akas(ctx: HydrateContext) -> List[str]:
    common = ctx.connection.common_columns()
    arn = (
        f"arn:{common['Partition']}:ssm:{ctx.region}:{common['AccountId']}"
        f":maintenancewindow/{_window_id(ctx)}"
    )
    return [arn]


def table_aws_ssm_maintenance_window() -> TableDefinition:
    return TableDefinition(
        name="aws_ssm_maintenance_window",
        description="AWS SSM Maintenance Window",
        regional=True,
        get=GetConfig(
            key_columns=("window_id",),
            ignore_error_codes=("DoesNotExistException",),
            hydrate=get_maintenance_window,
        ),
        list=ListConfig(hydrate=list_ssm_maintenance_windows),
        columns=aws_regional_columns([
            Column(
                name="name",
                type=ColumnType.STRING,
                description="The name of the Maintenance Window.",
            ),
            Column(
                name="window_id",
                type=ColumnType.STRING,
                description="The ID of the Maintenance Window.",
            ),
            Column(
                name="enabled",
                type=ColumnType.BOOL,
                description="Indicates whether the Maintenance Window is enabled.",
            ),
            Column(
                name="allow_unassociated_targets",
                type=ColumnType.BOOL,
                description="Whether targets must be registered with the Maintenance Window before tasks "
                "can be defined for those targets.",
                hydrate=get_maintenance_window,
            ),
            Column(
                name="description",
                type=ColumnType.STRING,
                description="A description of the Maintenance Window.",
            ),
            Column(
                name="tags_src",
                type=ColumnType.JSON,
                description="A list of tags assigned to the Maintenance Window.",
                hydrate=get_maintenance_window_tags,
                transform=Transform.from_field("TagList"),
            ),
            Column(
                name="duration",
                type=ColumnType.STRING,
                description="The duration of the Maintenance Window in hours.",
            ),
            Column(
                name="cutoff",
                type=ColumnType.INT,
                description="The number of hours before the end of the Maintenance Window that Systems "
                "Manager stops scheduling new tasks for execution.",
            ),
            Column(
                name="schedule",
                type=ColumnType.STRING,
                description="The schedule of the Maintenance Window in the form of a cron or rate expression.",
            ),
            Column(
                name="schedule_offset",
                type=ColumnType.INT,
                description="The number of days to wait to run a Maintenance Window after the scheduled "
                "CRON expression date and time.",
            ),
            Column(
                name="targets",
                type=ColumnType.JSON,
                description="The targets of Maintenance Window.",
                hydrate=get_maintenance_window_targets,
                transform=Transform.from_value(),
            ),
            Column(
                name="tasks",
                type=ColumnType.JSON,
                description="The Tasks of Maintenance Window.",
                hydrate=get_maintenance_window_tasks,
                transform=Transform.from_value(),
            ),
            Column(
                name="modified_date",
                type=ColumnType.TIMESTAMP,
                description="The date the Maintenance Window was last modified.",
                hydrate=get_maintenance_window,
            ),
            Column(
                name="next_execution_time",
                type=ColumnType.TIMESTAMP,
                description="The next time the maintenance window will actually run.",
            ),
            # Standard columns for all tables
            Column(
                name="title",
                type=ColumnType.STRING,
                description=resource_interface_description("title"),
                transform=Transform.from_field("Name"),
            ),
            Column(
                name="tags",
                type=ColumnType.JSON,
                description=resource_interface_description("tags"),
                hydrate=get_maintenance_window_tags,
                transform=Transform.from_field("TagList").transform(tag_list_to_dict),
            ),
            Column(
                name="akas",
                type=ColumnType.JSON,
                description=resource_interface_description("akas"),
                hydrate=get_maintenance_window_akas,
                transform=Transform.from_value(),
            ),
        ]),
    )
