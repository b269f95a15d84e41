"""
AWS Lambda entry point for the AWS resource tables plugin.
"""

import json
from typing import Any, Dict

from botocore.exceptions import ClientError

from .cloud_tables.core import query_table, rows_to_json
from .cloud_tables.errors import DecodeError, HydrateError, UnknownTableError
from .config import load_config
from .utils import setup_logging

JSON_HEADERS = {"Content-Type": "application/json"}


def _error_response(status_code: int, error: str, message: str) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "body": json.dumps({"error": error, "message": message}),
        "headers": JSON_HEADERS,
    }


def lambda_handler(event: dict, context: object) -> dict:
    """
    AWS Lambda handler function.

    Args:
        event: Query to run: {"table": ..., "columns": [...], "quals": {...}, "limit": n}
        context: Lambda context

    Returns:
        Dictionary with statusCode and body containing the rows
    """
    logger = setup_logging()
    try:
        # Load and validate configuration
        config = load_config()
        logger = setup_logging(config.log_level)

        table_name = event.get("table")
        if not table_name:
            raise ValueError("Event must name a 'table'")
        limit = event.get("limit")
        if limit is not None:
            limit = int(limit)

        logger.info(f"Querying table {table_name}")
        rows = query_table(
            config,
            table_name,
            columns=event.get("columns"),
            quals=event.get("quals"),
            limit=limit,
        )

        return {
            "statusCode": 200,
            "body": rows_to_json(rows),
            "headers": JSON_HEADERS,
        }

    except UnknownTableError as e:
        logger.error(f"Query error: {e}")
        return _error_response(400, "Unknown table", str(e))

    except (HydrateError, DecodeError, ClientError) as e:
        # AWS or payload errors abort the query
        logger.error(f"Query failed: {e}")
        return _error_response(502, "Upstream error", str(e))

    except ValueError as e:
        # Configuration or validation errors
        logger.error(f"Configuration error: {str(e)}")
        return _error_response(400, "Configuration error", str(e))

    except Exception as e:
        # Unexpected errors
        logger.error(f"Unexpected error: {str(e)}")
        return _error_response(500, "Internal server error", str(e))
