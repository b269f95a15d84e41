"""
Row mapping: column types, value coercion and transform chains.

A column value is produced in two steps. A Transform chain extracts and
reshapes a value from the column's source (the resource item, or the result
of the column's hydrate function). The column's ColumnType then coerces it
to the declared semantic type. Both steps are pure.
"""

import ipaddress
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple
from urllib.parse import unquote

from .errors import DecodeError
from .items import ResourceItem


class ColumnType(Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    JSON = "json"
    TIMESTAMP = "timestamp"
    IPADDR = "ipaddr"
    CIDR = "cidr"


_TRUE_STRINGS = ("true", "1", "yes")
_FALSE_STRINGS = ("false", "0", "no")


def _normalise_json(value: Any) -> Any:
    if isinstance(value, ResourceItem):
        return _normalise_json(value.data)
    if isinstance(value, Mapping):
        return {str(k): _normalise_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalise_json(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise DecodeError(f"Invalid timestamp '{value}': {e}") from e
    raise DecodeError(f"Cannot convert {type(value).__name__} to timestamp")


def coerce_value(column_type: ColumnType, value: Any) -> Any:
    """
    Coerces a value to the given column type.

    None always passes through unchanged.

    Raises:
        DecodeError: If the value cannot be represented as the column type
    """
    if value is None:
        return None

    try:
        if column_type is ColumnType.STRING:
            return value if isinstance(value, str) else str(value)
        if column_type is ColumnType.INT:
            return int(value)
        if column_type is ColumnType.DOUBLE:
            return float(value)
        if column_type is ColumnType.BOOL:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
                raise DecodeError(f"Invalid boolean '{value}'")
            return bool(value)
        if column_type is ColumnType.TIMESTAMP:
            return _parse_timestamp(value)
        if column_type is ColumnType.IPADDR:
            return str(ipaddress.ip_address(value))
        if column_type is ColumnType.CIDR:
            return str(ipaddress.ip_network(value, strict=False))
        if column_type is ColumnType.JSON:
            return _normalise_json(value)
    except (TypeError, ValueError) as e:
        if isinstance(e, DecodeError):
            raise
        raise DecodeError(f"Cannot convert {value!r} to {column_type.value}: {e}") from e

    raise DecodeError(f"Unsupported column type: {column_type}")


def snake_to_camel(name: str) -> str:
    """Convert a column name such as 'user_id' to the API field name 'UserId'."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def get_field(source: Any, path: str) -> Any:
    """
    Look up a dotted field path ('PermissionsBoundary.PermissionsBoundaryArn') in a source.

    Missing fields resolve to None rather than raising.
    """
    value = source
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, ResourceItem):
            value = value.data
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


# A transform step receives the current value and the column name
Step = Callable[[Any, str], Any]


class Transform:
    """
    A chain of steps mapping a column's source to its value.

    The first step extracts a value from the source; later steps, added with
    transform(), receive the previous step's output.
    """

    def __init__(self, steps: Iterable[Step] = ()) -> None:
        self._steps: Tuple[Step, ...] = tuple(steps)

    @classmethod
    def from_field(cls, *paths: str) -> "Transform":
        """Take the first non-None value among the given field paths."""

        def step(source: Any, _column: str) -> Any:
            for path in paths:
                value = get_field(source, path)
                if value is not None:
                    return value
            return None

        return cls([step])

    @classmethod
    def from_camel(cls) -> "Transform":
        """Take the field named after the column in CamelCase (user_id -> UserId)."""
        return cls([lambda source, column: get_field(source, snake_to_camel(column))])

    @classmethod
    def from_value(cls) -> "Transform":
        """Take the whole source value."""
        return cls([lambda source, _column: source])

    @classmethod
    def from_constant(cls, constant: Any) -> "Transform":
        return cls([lambda _source, _column: constant])

    def transform(self, func: Callable[[Any], Any]) -> "Transform":
        """Return a new chain with func applied to the current value."""
        return Transform(self._steps + (lambda value, _column: func(value),))

    def apply(self, source: Any, column_name: str) -> Any:
        value = source
        for step in self._steps:
            value = step(value, column_name)
        return value


DEFAULT_TRANSFORM = Transform.from_camel()


# Value transforms shared by table modules

def parse_policy_document(document: Any) -> Any:
    """
    Decodes an IAM policy document into a Python structure.

    IAM returns inline and trust policy documents URL-encoded. Documents that
    are already decoded (dicts) are returned unchanged.

    Args:
        document: URL-encoded JSON string, plain JSON string, dict, or None

    Returns:
        Parsed policy document, or None when no document is given

    Raises:
        DecodeError: If the document is not valid URL-encoded JSON
    """
    if document is None or isinstance(document, (dict, list)):
        return document
    if not isinstance(document, str):
        raise DecodeError(f"Unsupported policy document type: {type(document).__name__}")

    try:
        decoded = unquote(document, errors="strict")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid URL encoding in policy document: {e}") from e

    try:
        return json.loads(decoded)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON in policy document: {e}") from e


def tag_list_to_dict(tag_list: Optional[Iterable[Mapping[str, Any]]]) -> Optional[dict]:
    """
    Converts an AWS tag list ([{"Key": k, "Value": v}, ...]) into a dict.

    Returns None when there are no tags, so the column renders as null.
    """
    if not tag_list:
        return None
    return {tag["Key"]: tag.get("Value") for tag in tag_list}


def arn_to_akas(arn: Optional[str]) -> Optional[list]:
    if not arn:
        return None
    return [arn]
