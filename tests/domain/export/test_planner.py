from __future__ import annotations

import pytest

from catalogsync.domain.errors import PlanningError
from catalogsync.domain.export import order_by_dependency, plan


def test_plan_covers_every_item_in_order() -> None:
    items = list(range(7))

    chunks = plan(items, 3)

    assert chunks == [[0, 1, 2], [3, 4, 5], [6]]
    assert all(0 < len(chunk) <= 3 for chunk in chunks)


def test_plan_single_chunk_when_batch_is_large() -> None:
    assert plan(["a", "b"], 500) == [["a", "b"]]


def test_plan_of_nothing_is_empty() -> None:
    assert plan([], 10) == []


@pytest.mark.parametrize("batch_size", [0, -1, True, 2.5])
def test_plan_rejects_invalid_batch_sizes(batch_size: object) -> None:
    with pytest.raises(PlanningError, match="positive integer"):
        plan([1, 2], batch_size)  # type: ignore[arg-type]


def test_plan_rejects_duplicate_keys() -> None:
    with pytest.raises(PlanningError, match="Duplicate"):
        plan(["a", "b", "a"], 2, key=lambda item: item)


def test_plan_moves_dependants_behind_roots() -> None:
    parents = {"child": "root", "grandchild": "child"}

    chunks = plan(
        ["grandchild", "child", "root", "other"],
        2,
        parent_of=parents.get,
    )

    assert chunks == [["root", "other"], ["grandchild", "child"]]


def test_order_by_dependency_is_stable() -> None:
    parents = {"b": "x", "d": "x"}

    assert order_by_dependency(["a", "b", "c", "d"], parents.get) == ["a", "c", "b", "d"]
