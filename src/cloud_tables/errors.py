"""
Error types for the AWS resource tables plugin.

API failures are surfaced as the original botocore ClientError wherever the
caller can handle them directly. Failures inside per-item hydration are
wrapped in HydrateError so the caller knows which hydrator and which item
failed, with the original exception chained as __cause__.
"""

from typing import Callable, Iterable, Optional

from botocore.exceptions import ClientError


class CloudTablesError(Exception):
    """Base class for all plugin errors."""


class UnknownTableError(CloudTablesError, KeyError):
    """Raised when a query names a table the plugin does not define."""

    def __init__(self, table_name: str) -> None:
        super().__init__(table_name)
        self.table_name = table_name

    def __str__(self) -> str:
        return f"Unknown table '{self.table_name}'"


class HydrateConfigError(CloudTablesError):
    """Raised at load time when a table's hydrate dependency graph is invalid."""


class DecodeError(CloudTablesError, ValueError):
    """Raised when an embedded payload (URL-encoded or JSON) cannot be decoded."""


class HydrateError(CloudTablesError):
    """Raised when a hydrate function fails for one item."""

    def __init__(self, hydrator: str, item_key: Optional[str], cause: BaseException) -> None:
        super().__init__(f"Hydrate function '{hydrator}' failed for item '{item_key}': {cause}")
        self.hydrator = hydrator
        self.item_key = item_key
        self.cause = cause


def error_code(error: BaseException) -> Optional[str]:
    """Return the AWS error code of a ClientError, or None for any other exception."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_not_found_error(codes: Iterable[str]) -> Callable[[BaseException], bool]:
    """
    Build a predicate that reports whether an error is one of the given AWS error codes.

    Args:
        codes: AWS error codes to treat as "not found"

    Returns:
        Function taking an exception and returning True when it should be ignored
    """
    code_set = frozenset(codes)

    def predicate(error: BaseException) -> bool:
        return error_code(error) in code_set

    return predicate
