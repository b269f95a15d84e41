"""
Columns shared by every AWS table: partition, account id and (for regional
tables) region.
"""

from typing import Any, Dict, Iterable, Tuple

from ..utils import api_error_handler
from .hydrate import HydrateContext
from .schema import Column
from .transforms import ColumnType, Transform


@api_error_handler
def get_common_columns(ctx: HydrateContext) -> Dict[str, Any]:
    data: Dict[str, Any] = dict(ctx.connection.common_columns())
    data["Region"] = ctx.region
    return data


def _account_columns() -> Tuple[Column, ...]:
    return (
        Column(
            name="partition",
            type=ColumnType.STRING,
            description="The AWS partition in which the resource is located (aws, aws-cn, or aws-us-gov).",
            hydrate=get_common_columns,
            transform=Transform.from_field("Partition"),
        ),
        Column(
            name="account_id",
            type=ColumnType.STRING,
            description="The AWS Account ID in which the resource is located.",
            hydrate=get_common_columns,
            transform=Transform.from_field("AccountId"),
        ),
    )


def aws_columns(columns: Iterable[Column]) -> Tuple[Column, ...]:
    """Append the account columns to a global table's columns."""
    return tuple(columns) + _account_columns()


def aws_regional_columns(columns: Iterable[Column]) -> Tuple[Column, ...]:
    """Append the account and region columns to a regional table's columns."""
    region = Column(
        name="region",
        type=ColumnType.STRING,
        description="The AWS Region in which the resource is located.",
        hydrate=get_common_columns,
        transform=Transform.from_field("Region"),
    )
    return tuple(columns) + _account_columns() + (region,)


def resource_interface_description(name: str) -> str:
    return {
        "akas": "Array of globally unique identifier strings (also known as) for the resource.",
        "tags": "A map of tags for the resource.",
        "title": "Title of the resource.",
    }[name]
