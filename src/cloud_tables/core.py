"""
Core query orchestration.

This module ties configuration, plugin registry, connection and query runner
together for the Lambda handler and the command-line tool.
"""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..config import Config
from ..utils import get_logger
from .connection import Connection
from .query import QueryRunner
from .registry import build_plugin
from .types import Quals, Row


def query_table(
    config: Config,
    table_name: str,
    columns: Optional[Sequence[str]] = None,
    quals: Optional[Quals] = None,
    limit: Optional[int] = None,
    session: Optional[Any] = None,
) -> List[Row]:
    """
    Main entry point for running one query end to end.

    This function:
    - Builds the plugin and its table registry
    - Opens a connection (boto3 session and client cache)
    - Runs the query and collects its rows

    Args:
        config: Plugin configuration
        table_name: Table to query
        columns: Columns to return, all columns when None
        quals: Column values to match
        limit: Maximum number of rows
        session: boto3 session to use instead of one built from config

    Returns:
        List of row dicts
    """
    logger = get_logger()
    plugin = build_plugin(config)
    connection = Connection(config, session=session)
    runner = QueryRunner(plugin, connection, max_workers=config.max_workers)

    rows = list(runner.run(table_name, columns=columns, quals=quals, limit=limit))
    logger.info(f"{table_name}: {len(rows)} rows")
    return rows


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def rows_to_json(rows: List[Row], indent: Optional[int] = None) -> str:
    """Serialise rows, rendering timestamps as ISO 8601 strings."""
    return json.dumps(rows, default=_json_default, indent=indent)


def describe_tables(config: Optional[Config] = None) -> Dict[str, Dict[str, Any]]:
    """Return name, description and columns of every table, for listings."""
    plugin = build_plugin(config)
    return {
        name: {
            "description": table.description,
            "regional": table.regional,
            "key_columns": list(table.get.key_columns) if table.get else [],
            "columns": [
                {"name": c.name, "type": c.type.value, "description": c.description}
                for c in table.columns
            ],
        }
        for name, table in sorted(plugin.tables.items())
    }
