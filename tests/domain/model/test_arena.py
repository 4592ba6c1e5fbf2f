from __future__ import annotations

import pytest

from catalogsync.domain.model import AssetType, EntityArena
from tests.helpers.entities import key, make_entity


def test_arena_indexes_children() -> None:
    site = key(AssetType.SITE, "s1")
    arena = EntityArena(
        [
            make_entity(AssetType.SITE, "s1"),
            make_entity(AssetType.PROJECT, "p1", parent=site),
            make_entity(AssetType.PROJECT, "p2", parent=site),
        ]
    )

    assert [child.external_id for child in arena.children_of(site)] == ["p1", "p2"]
    assert arena.children_of(key(AssetType.PROJECT, "p1")) == []
    assert len(arena.of_type(AssetType.PROJECT)) == 2


def test_arena_rejects_duplicate_keys() -> None:
    arena = EntityArena([make_entity(AssetType.SITE, "s1")])

    with pytest.raises(ValueError, match="already present"):
        arena.add(make_entity(AssetType.SITE, "s1"))


def test_same_external_id_in_other_scope_is_distinct() -> None:
    arena = EntityArena(
        [
            make_entity(AssetType.PROJECT, "p1"),
            make_entity(AssetType.PROJECT, "p1", scope="site-2"),
        ]
    )

    assert len(arena) == 2
    assert len(arena.of_type(AssetType.PROJECT, scope="site-2")) == 1


def test_set_parent_moves_child() -> None:
    old_parent = key(AssetType.SITE, "s1")
    new_parent = key(AssetType.SITE, "s2")
    project = make_entity(AssetType.PROJECT, "p1", parent=old_parent)
    arena = EntityArena([make_entity(AssetType.SITE, "s1"), make_entity(AssetType.SITE, "s2")])
    arena.add(project)

    arena.set_parent(project, new_parent)

    assert arena.children_of(old_parent) == []
    assert arena.children_of(new_parent) == [project]
    assert project.parent == new_parent
