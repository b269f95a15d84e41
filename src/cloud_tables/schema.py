"""
Table and column definitions.

A TableDefinition is the static description of one table: its columns, the
list and get functions that produce items, and the hydrate functions (with
their dependencies) that enrich them. Definitions are frozen and built once
when the plugin is loaded.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple

from .hydrate import HydrateContext, HydrateFunc, HydrateGraph, hydrate_name
from .items import ResourceItem
from .transforms import DEFAULT_TRANSFORM, ColumnType, Transform, coerce_value
from .types import HydrateResults, Quals

ListFunc = Callable[[HydrateContext], Iterable[ResourceItem]]
GetFunc = Callable[[HydrateContext], Optional[ResourceItem]]
ItemFromKeyFunc = Callable[[HydrateContext], ResourceItem]


@dataclass(frozen=True)
class Column:
    """One output column: name, semantic type and how its value is extracted."""

    name: str
    type: ColumnType
    description: str = ""
    hydrate: Optional[HydrateFunc] = None
    transform: Optional[Transform] = None

    def value(
        self,
        item: ResourceItem,
        hydrate_results: HydrateResults,
        default_transform: Transform = DEFAULT_TRANSFORM,
    ) -> Any:
        """
        Render this column for one item.

        The source is the item itself, or the result of the column's hydrate
        function. The explicit transform wins over the default one.

        Raises:
            DecodeError: If the value cannot be coerced to the column type
        """
        if self.hydrate is None:
            source: Any = item
        else:
            source = hydrate_results[hydrate_name(self.hydrate)]
        transform = self.transform or default_transform
        return coerce_value(self.type, transform.apply(source, self.name))


@dataclass(frozen=True)
class ListConfig:
    hydrate: ListFunc


@dataclass(frozen=True)
class GetConfig:
    """
    Binding for single-item lookups.

    item_from_key builds a minimal item from the key column quals and get
    hydrate fetches the full item. ignore_error_codes replaces the plugin
    default codes; codes added through configuration apply either way. region_from_key returns the region a key
    belongs to, or None when the key does not name one.
    """

    key_columns: Tuple[str, ...]
    hydrate: GetFunc
    item_from_key: Optional[ItemFromKeyFunc] = None
    ignore_error_codes: Optional[Tuple[str, ...]] = None
    region_from_key: Optional[Callable[[Quals], Optional[str]]] = None


@dataclass(frozen=True)
class HydrateConfig:
    func: HydrateFunc
    depends: Tuple[HydrateFunc, ...] = ()


@dataclass(frozen=True)
class TableDefinition:
    name: str
    description: str
    columns: Tuple[Column, ...]
    list: ListConfig
    get: Optional[GetConfig] = None
    hydrate_config: Tuple[HydrateConfig, ...] = ()
    regional: bool = False
    graph: HydrateGraph = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = [column.name for column in self.columns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Table '{self.name}' declares duplicate columns: {', '.join(duplicates)}")
        if self.get is not None:
            missing = [key for key in self.get.key_columns if key not in names]
            if missing:
                raise ValueError(f"Table '{self.name}' get key columns are not columns: {', '.join(missing)}")

        graph = HydrateGraph(
            (column.hydrate for column in self.columns if column.hydrate is not None),
            {config.func: config.depends for config in self.hydrate_config},
        )
        object.__setattr__(self, "graph", graph)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise ValueError(f"Table '{self.name}' has no column '{name}'")

    def select(self, names: Optional[Sequence[str]]) -> Tuple[Column, ...]:
        """Return the columns for the given names, or every column when names is None."""
        if names is None:
            return self.columns
        return tuple(self.column(name) for name in names)

    def required_hydrates(self, columns: Iterable[Column]) -> Tuple[str, ...]:
        return tuple(sorted({hydrate_name(c.hydrate) for c in columns if c.hydrate is not None}))
