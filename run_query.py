#!/usr/bin/env python3
"""
Command-line interface for querying AWS resource tables locally.

It requires AWS credentials to be configured (via AWS CLI, environment variables, or IAM roles).

Usage:
    python run_query.py --list-tables
    python run_query.py --table aws_iam_user
    python run_query.py --table aws_iam_user --column name --column inline_policies --limit 5
    python run_query.py --table aws_ssm_maintenance_window --qual window_id=mw-0123456789abcdef0 --region us-east-1
"""

import argparse
import os
import sys
from typing import Any, Dict, List

# Add the src directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from src.cloud_tables.core import describe_tables, query_table, rows_to_json
from src.config import Config
from src.utils import setup_logging


def parse_quals(raw_quals: List[str]) -> Dict[str, str]:
    """Parse repeated --qual column=value arguments."""
    quals = {}
    for raw in raw_quals:
        column, sep, value = raw.partition("=")
        if not sep or not column:
            raise ValueError(f"Qual must look like column=value, got '{raw}'")
        quals[column.strip()] = value.strip()
    return quals


def main() -> None:
    """Main entry point for the command-line query tool."""
    parser = argparse.ArgumentParser(
        description="Query AWS resources as tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_query.py --table aws_vpc --region eu-west-2 --region us-east-1
  python run_query.py --table aws_iam_user --qual name=alice --output-format json
        """
    )

    parser.add_argument("--table", help="Table to query (e.g. aws_iam_user)")
    parser.add_argument(
        "--list-tables",
        action="store_true",
        help="List the available tables and their columns, then exit"
    )
    parser.add_argument(
        "--column",
        action="append",
        dest="columns",
        help="Column to return; repeat for several columns (default: all columns)"
    )
    parser.add_argument(
        "--qual",
        action="append",
        default=[],
        help="Filter as column=value; key columns switch the query to a single-item get"
    )
    parser.add_argument("--limit", type=int, help="Maximum number of rows to return")
    parser.add_argument(
        "--region",
        action="append",
        dest="regions",
        help="AWS region to query; repeat for several regions (default: eu-west-2)"
    )
    parser.add_argument("--profile", help="AWS profile name to use")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=10,
        help="Maximum concurrent API calls per hydrate fan-out (default: 10)"
    )
    parser.add_argument(
        "--output-format",
        choices=["json", "pretty"],
        default="pretty",
        help="Output format for the rows (default: pretty)"
    )

    args = parser.parse_args()

    if args.list_tables:
        print_tables(describe_tables())
        sys.exit(0)

    if not args.table:
        parser.error("--table is required unless --list-tables is given")

    logger = setup_logging(args.log_level)

    try:
        config = Config(
            regions=args.regions or ["eu-west-2"],
            aws_profile=args.profile,
            log_level=args.log_level,
            max_workers=args.max_workers,
        )
        quals = parse_quals(args.qual)

        logger.info(f"Querying {args.table} in {', '.join(config.regions)}")
        rows = query_table(config, args.table, columns=args.columns, quals=quals, limit=args.limit)

        if args.output_format == "json":
            print(rows_to_json(rows, indent=2))
        else:
            print_rows(args.table, rows)
        sys.exit(0)

    except Exception as e:
        logger.error(f"Error running query: {str(e)}")
        print(f"ERROR: {str(e)}", file=sys.stderr)
        sys.exit(1)


def print_tables(tables: Dict[str, Dict[str, Any]]) -> None:
    """Print every table with its key columns and columns."""
    for name, table in tables.items():
        scope = "regional" if table["regional"] else "global"
        print(f"\n{name} ({scope}): {table['description']}")
        if table["key_columns"]:
            print(f"  get by: {', '.join(table['key_columns'])}")
        for column in table["columns"]:
            print(f"  - {column['name']} [{column['type']}]")


def print_rows(table_name: str, rows: List[Dict[str, Any]]) -> None:
    """Print rows one record at a time, one column per line."""
    print("\n" + "="*60)
    print(f"{table_name} ({len(rows)} rows)")
    print("="*60)

    if not rows:
        print("No rows returned.")

    for i, row in enumerate(rows, 1):
        print(f"\n-[ RECORD {i} ]-")
        width = max(len(column) for column in row) if row else 0
        for column, value in row.items():
            print(f"{column.ljust(width)} | {'' if value is None else value}")

    print("\n" + "="*60)


if __name__ == "__main__":
    main()
