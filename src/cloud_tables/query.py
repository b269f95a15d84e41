"""
Query runner.

The runner plays the host's part of the table protocol: it picks list or get
mode from the quals, repeats the call per region for regional tables, runs
the hydrate functions the requested columns need, renders rows and applies
the row limit. Rows are yielded as soon as they are built, so stopping early
also stops further page requests.
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from botocore.exceptions import ClientError

from ..utils import get_logger
from .connection import Connection
from .errors import error_code, is_not_found_error
from .hydrate import DEFAULT_MAX_WORKERS, HydrateContext, run_hydrate_plan
from .items import ResourceItem
from .registry import Plugin
from .schema import Column, TableDefinition
from .transforms import coerce_value
from .types import Quals, Row


class QueryRunner:
    """Runs queries against the tables of one plugin over one connection."""

    def __init__(self, plugin: Plugin, connection: Connection, max_workers: Optional[int] = None) -> None:
        self.plugin = plugin
        self.connection = connection
        if max_workers is None:
            max_workers = getattr(connection.config, "max_workers", DEFAULT_MAX_WORKERS)
        self.max_workers = max_workers

    def run(
        self,
        table_name: str,
        columns: Optional[Sequence[str]] = None,
        quals: Optional[Quals] = None,
        limit: Optional[int] = None,
    ) -> Iterator[Row]:
        """
        Query a table and yield its rows.

        Args:
            table_name: Name of the table, e.g. 'aws_iam_user'
            columns: Columns to return, all columns when None
            quals: Column values to match; the get key columns select get mode
            limit: Maximum number of rows to yield

        Returns:
            Iterator of row dicts keyed by column name

        Raises:
            UnknownTableError: If the table does not exist
            ValueError: If a column or qual names an unknown column
            HydrateError: If a hydrate function fails for a row
            DecodeError: If a column value cannot be decoded
            ClientError: If a list or get call fails with a non-ignorable error
        """
        table = self.plugin.table(table_name)
        selected = table.select(columns)
        quals = dict(quals or {})
        for name in quals:
            table.column(name)

        # Validate eagerly, then hand back a lazy iterator
        return self._limited(self._rows(table, selected, quals), limit)

    @staticmethod
    def _limited(rows: Iterator[Row], limit: Optional[int]) -> Iterator[Row]:
        if limit is not None and limit <= 0:
            return
        count = 0
        for row in rows:
            yield row
            count += 1
            if limit is not None and count >= limit:
                return

    def _regions(self, table: TableDefinition, quals: Quals, get_mode: bool) -> List[str]:
        if not table.regional:
            return [self.connection.config.default_region]
        regions = list(self.connection.config.regions)
        # A key that names its region (e.g. a queue URL) narrows a get to that region
        if get_mode and table.get is not None and table.get.region_from_key is not None:
            key_region = table.get.region_from_key(quals)
            if key_region is not None:
                return [region for region in regions if region == key_region]
        return regions

    def _is_get(self, table: TableDefinition, quals: Quals) -> bool:
        return table.get is not None and all(key in quals for key in table.get.key_columns)

    def _rows(self, table: TableDefinition, selected: Sequence[Column], quals: Dict[str, Any]) -> Iterator[Row]:
        logger = get_logger()
        get_mode = self._is_get(table, quals)
        logger.debug(f"Querying {table.name} in {'get' if get_mode else 'list'} mode")

        # Columns used for filtering are rendered even when not selected
        rendered = list(selected) + [
            table.column(name) for name in quals if name not in {c.name for c in selected}
        ]
        wanted = {qual: coerce_value(table.column(qual).type, value) for qual, value in quals.items()}

        try:
            for region in self._regions(table, quals, get_mode):
                context = HydrateContext(
                    connection=self.connection,
                    region=region,
                    quals=quals,
                    max_workers=self.max_workers,
                )
                items = self._get_items(table, context) if get_mode else self._list_items(table, context)
                for item in items:
                    row = self._build_row(table, rendered, item, context)
                    if all(row[name] == value for name, value in wanted.items()):
                        yield {column.name: row[column.name] for column in selected}
        except ClientError as e:
            logger.error(f"{table.name}: AWS ClientError ({error_code(e)}): {e}")
            raise

    def _list_items(self, table: TableDefinition, context: HydrateContext) -> Iterable[ResourceItem]:
        return table.list.hydrate(context)

    def _get_items(self, table: TableDefinition, context: HydrateContext) -> List[ResourceItem]:
        get_config = table.get
        assert get_config is not None
        if get_config.item_from_key is not None:
            context = replace(context, item=get_config.item_from_key(context))

        ignore = is_not_found_error(self.plugin.ignore_error_codes(table))
        try:
            item = get_config.hydrate(context)
        except ClientError as e:
            if ignore(e):
                get_logger().info(
                    f"{table.name}: {error_code(e)} for {dict(context.quals)} in {context.region}, returning no rows"
                )
                return []
            raise
        return [item] if item is not None else []

    def _build_row(
        self,
        table: TableDefinition,
        columns: Sequence[Column],
        item: ResourceItem,
        context: HydrateContext,
    ) -> Row:
        plan = table.graph.plan(table.required_hydrates(columns))
        results = run_hydrate_plan(plan, table.graph, replace(context, item=item))
        return {
            column.name: column.value(item, results, self.plugin.default_transform)
            for column in columns
        }
