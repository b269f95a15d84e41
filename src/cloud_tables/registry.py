"""
Plugin registry.

build_plugin() constructs every table definition once and returns them in an
immutable Plugin. There is no module-level table map; callers hold the Plugin
and pass it to the query runner.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Tuple

from ..config import Config
from ..utils import get_logger
from .errors import UnknownTableError
from .schema import TableDefinition
from .tables import (
    table_aws_iam_role,
    table_aws_iam_user,
    table_aws_sqs_queue,
    table_aws_ssm_maintenance_window,
    table_aws_vpc,
)
from .transforms import DEFAULT_TRANSFORM, Transform

PLUGIN_NAME = "aws-resource-tables"

# Get calls treat these error codes as "no such row" for every table
DEFAULT_IGNORE_ERROR_CODES = ("ResourceNotFoundException", "NoSuchEntity")

TABLE_BUILDERS: Tuple[Callable[[], TableDefinition], ...] = (
    table_aws_iam_role,
    table_aws_iam_user,
    table_aws_sqs_queue,
    table_aws_ssm_maintenance_window,
    table_aws_vpc,
)


@dataclass(frozen=True)
class Plugin:
    name: str
    tables: Mapping[str, TableDefinition]
    default_transform: Transform = DEFAULT_TRANSFORM
    default_ignore_error_codes: Tuple[str, ...] = DEFAULT_IGNORE_ERROR_CODES
    extra_ignore_error_codes: Tuple[str, ...] = ()

    def table(self, name: str) -> TableDefinition:
        try:
            return self.tables[name]
        except KeyError:
            raise UnknownTableError(name) from None

    def ignore_error_codes(self, table: TableDefinition) -> Tuple[str, ...]:
        """
        Error codes a get call on this table treats as not found.

        A table's own codes replace the plugin defaults, but codes added
        through configuration apply to every table.
        """
        if table.get is None or table.get.ignore_error_codes is None:
            return self.default_ignore_error_codes
        return tuple(dict.fromkeys(table.get.ignore_error_codes + self.extra_ignore_error_codes))


def build_plugin(
    config: Optional[Config] = None,
    table_builders: Iterable[Callable[[], TableDefinition]] = TABLE_BUILDERS,
) -> Plugin:
    """
    Builds the plugin and all of its table definitions.

    Args:
        config: Plugin configuration; its ignore_error_codes extend the default
            and per-table codes
        table_builders: Functions returning one TableDefinition each

    Returns:
        Plugin with a read-only table-name to definition mapping

    Raises:
        ValueError: If two tables share a name
        HydrateConfigError: If a table's hydrate dependencies are invalid
    """
    tables = {}
    for builder in table_builders:
        table = builder()
        if table.name in tables:
            raise ValueError(f"Duplicate table name '{table.name}'")
        tables[table.name] = table

    extra_codes = tuple(config.ignore_error_codes) if config is not None else ()
    ignore_codes = tuple(dict.fromkeys(DEFAULT_IGNORE_ERROR_CODES + extra_codes))

    get_logger().debug(f"Loaded {len(tables)} tables: {', '.join(sorted(tables))}")
    return Plugin(
        name=PLUGIN_NAME,
        tables=MappingProxyType(tables),
        default_ignore_error_codes=ignore_codes,
        extra_ignore_error_codes=extra_codes,
    )
