"""
Hydrate functions: per-item context, dependency ordering and concurrent fan-out.

A hydrate function enriches one resource item with data the list or get call
did not return. It is called with a HydrateContext and returns any value; the
value is stored under the function's name and handed to dependent hydrate
functions and to the columns that declare it.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, TypeVar

from ..utils import get_logger
from .errors import HydrateConfigError, HydrateError
from .items import ResourceItem

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_MAX_WORKERS = 10


@dataclass(frozen=True)
class HydrateContext:
    """Everything a list, get or hydrate function may read for one call."""

    connection: Any
    region: str
    item: Optional[ResourceItem] = None
    quals: Mapping[str, Any] = field(default_factory=dict)
    results: Mapping[str, Any] = field(default_factory=dict)
    max_workers: int = DEFAULT_MAX_WORKERS

    def client(self, service_name: str) -> Any:
        """Return the shared boto3 client for a service in this context's region."""
        return self.connection.client(service_name, self.region)

    def result(self, hydrate_func: Callable) -> Any:
        """Return the result of a hydrate function this one declared a dependency on."""
        return self.results[hydrate_name(hydrate_func)]


HydrateFunc = Callable[[HydrateContext], Any]


def hydrate_name(func: Callable) -> str:
    return func.__name__


def fan_out(func: Callable[[T], R], args: Iterable[T], max_workers: int = DEFAULT_MAX_WORKERS) -> List[R]:
    """
    Call func once per argument concurrently and collect the results.

    Waits for every started call before returning. Results come back in
    completion order. If any call fails, calls that have not started yet are
    cancelled, results of calls already running are discarded, and the first
    failure seen is raised; a partial list is never returned.

    Args:
        func: Function applied to each argument
        args: Arguments, one call each
        max_workers: Upper bound on concurrent calls

    Returns:
        List of results, one per argument

    Raises:
        Exception: The first exception raised by any call
    """
    arg_list = list(args)
    if not arg_list:
        return []

    results: List[R] = []
    first_error: Optional[BaseException] = None

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(arg_list)))) as executor:
        futures = [executor.submit(func, arg) for arg in arg_list]
        for future in as_completed(futures):
            if future.cancelled():
                continue
            error = future.exception()
            if error is not None:
                if first_error is None:
                    first_error = error
                    for pending in futures:
                        pending.cancel()
                continue
            if first_error is None:
                results.append(future.result())

    if first_error is not None:
        raise first_error
    return results


class HydrateGraph:
    """
    The hydrate dependency graph of one table.

    Built once when the table is defined. Raises HydrateConfigError for
    conflicting names or dependency cycles, so a bad table fails at plugin
    load instead of at query time.
    """

    def __init__(self, funcs: Iterable[HydrateFunc], dependencies: Mapping[HydrateFunc, Sequence[HydrateFunc]]) -> None:
        self._funcs: Dict[str, HydrateFunc] = {}
        self._depends: Dict[str, Tuple[str, ...]] = {}

        for func in list(funcs) + list(dependencies):
            self._add(func)
        for func, depends in dependencies.items():
            for dependency in depends:
                self._add(dependency)
            self._depends[hydrate_name(func)] = tuple(sorted({hydrate_name(d) for d in depends}))

        self._order = self._topological_levels()

    def _add(self, func: HydrateFunc) -> None:
        name = hydrate_name(func)
        existing = self._funcs.get(name)
        if existing is not None and existing is not func:
            raise HydrateConfigError(f"Two different hydrate functions are named '{name}'")
        self._funcs[name] = func
        self._depends.setdefault(name, ())

    def _topological_levels(self) -> Tuple[Tuple[str, ...], ...]:
        remaining = {name: set(depends) for name, depends in self._depends.items()}
        levels: List[Tuple[str, ...]] = []
        while remaining:
            ready = sorted(name for name, depends in remaining.items() if not depends)
            if not ready:
                raise HydrateConfigError(
                    f"Hydrate dependency cycle between: {', '.join(sorted(remaining))}"
                )
            levels.append(tuple(ready))
            for name in ready:
                del remaining[name]
            for depends in remaining.values():
                depends.difference_update(ready)
        return tuple(levels)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for level in self._order for name in level)

    def func(self, name: str) -> HydrateFunc:
        return self._funcs[name]

    def depends_on(self, name: str) -> Tuple[str, ...]:
        return self._depends[name]

    def plan(self, required: Iterable[str]) -> List[Tuple[str, ...]]:
        """
        Return the hydrate functions needed for the required names, grouped in levels.

        Every function in a level depends only on functions in earlier levels,
        so functions within one level may run concurrently.
        """
        needed: Set[str] = set()
        stack = list(required)
        while stack:
            name = stack.pop()
            if name in needed:
                continue
            if name not in self._funcs:
                raise HydrateConfigError(f"Unknown hydrate function '{name}'")
            needed.add(name)
            stack.extend(self._depends[name])

        plan = []
        for level in self._order:
            selected = tuple(name for name in level if name in needed)
            if selected:
                plan.append(selected)
        return plan


def run_hydrate_plan(
    plan: Sequence[Tuple[str, ...]],
    graph: HydrateGraph,
    base_context: HydrateContext,
) -> Mapping[str, Any]:
    """
    Run a hydrate plan for one item and return the results keyed by function name.

    Levels run in order; functions within a level run concurrently. A level
    starts only after every function of the previous level succeeded, so a
    dependent function never runs without its dependency's result. The first
    failure is raised and no later level runs.
    """
    logger = get_logger()
    results: Dict[str, Any] = {}
    item_key = base_context.item.key if base_context.item is not None else None

    for level in plan:
        snapshot = MappingProxyType(dict(results))

        def call(name: str) -> Tuple[str, Any]:
            func = graph.func(name)
            context = HydrateContext(
                connection=base_context.connection,
                region=base_context.region,
                item=base_context.item,
                quals=base_context.quals,
                results=MappingProxyType({dep: snapshot[dep] for dep in graph.depends_on(name)}),
                max_workers=base_context.max_workers,
            )
            try:
                return name, func(context)
            except HydrateError:
                raise
            except Exception as e:
                logger.error(f"Hydrate function '{name}' failed for {item_key}: {e}")
                raise HydrateError(name, item_key, e) from e

        if len(level) == 1:
            name, value = call(level[0])
            results[name] = value
        else:
            for name, value in fan_out(call, level, base_context.max_workers):
                results[name] = value
        logger.debug(f"Hydrated {', '.join(level)} for {item_key}")

    return MappingProxyType(results)
