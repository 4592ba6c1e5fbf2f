"""Size-bounded batch planning."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence

from catalogsync.domain.errors import PlanningError


def order_by_dependency[T](
    items: Sequence[T],
    parent_of: Callable[[T], Hashable | None],
) -> list[T]:
    """Stable single-level reorder: items without a same-type parent go first.

    This is a heuristic for readable downstream hierarchies, not a topological
    sort; chains deeper than one level keep their input order.
    """

    roots = [item for item in items if parent_of(item) is None]
    dependants = [item for item in items if parent_of(item) is not None]
    return roots + dependants


def check_batch_size(batch_size: int) -> None:
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size <= 0:
        raise PlanningError(f"Batch size must be a positive integer, got {batch_size!r}")


def plan[T](
    items: Sequence[T],
    batch_size: int,
    *,
    key: Callable[[T], Hashable] | None = None,
    parent_of: Callable[[T], Hashable | None] | None = None,
) -> list[list[T]]:
    """Partition ``items`` into consecutive chunks of at most ``batch_size``.

    An empty input yields no chunks at all. ``key`` enables a duplicate check;
    ``parent_of`` enables :func:`order_by_dependency` before slicing.
    """

    check_batch_size(batch_size)

    if key is not None:
        seen: set[Hashable] = set()
        for item in items:
            item_key = key(item)
            if item_key in seen:
                raise PlanningError(f"Duplicate entity {item_key} in export set")
            seen.add(item_key)

    ordered = order_by_dependency(items, parent_of) if parent_of is not None else list(items)
    return [ordered[start : start + batch_size] for start in range(0, len(ordered), batch_size)]
