from __future__ import annotations

from datetime import UTC, datetime

import pytest

from catalogsync.domain.errors import UnknownEntityError
from catalogsync.domain.model import (
    AssetType,
    DescriptorRegistry,
    EntityArena,
    PropagationStatus,
    StatusFlag,
)
from catalogsync.domain.ports.source import SourceRecord
from catalogsync.domain.tracking import mark_synced, reconcile_listing, revive
from tests.helpers.entities import SCOPE, key, source_record

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _now() -> datetime:
    return NOW


def _projects(description: str = "desc-A", *, owner: str = "alice") -> list[SourceRecord]:
    return [
        source_record(
            "p1",
            "Proj-1",
            parent="s1",
            attributes={"Description": description, "Owner in Source": owner},
        ),
        source_record(
            "p2",
            "Proj-2",
            parent="s1",
            relations={"parent project": ["p1"]},
        ),
    ]


def test_first_listing_creates_new_entities(registry: DescriptorRegistry) -> None:
    arena = EntityArena()

    result = reconcile_listing(arena, registry[AssetType.PROJECT], SCOPE, _projects(), now=_now)

    assert (result.new, result.updated, result.unchanged, result.deleted) == (2, 0, 0, 0)
    p1 = arena[key(AssetType.PROJECT, "p1")]
    assert p1.status_flag is StatusFlag.NEW
    assert p1.propagation_status is PropagationStatus.NOT_SYNCED
    assert p1.parent == key(AssetType.SITE, "s1")
    assert p1.updated_at == NOW
    p2 = arena[key(AssetType.PROJECT, "p2")]
    assert [relation.target for relation in p2.relations] == [key(AssetType.PROJECT, "p1")]


def test_unchanged_listing_becomes_active(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)

    result = reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)

    assert result.unchanged == 2
    assert all(entity.status_flag is StatusFlag.ACTIVE for entity in arena)


def test_tracked_change_updates_in_place(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    original = arena[key(AssetType.PROJECT, "p1")]
    original_id = original.id
    original_fingerprint = original.fingerprint
    mark_synced(original)

    result = reconcile_listing(arena, descriptor, SCOPE, _projects("desc-B"), now=_now)

    assert result.updated == 1
    assert result.unchanged == 1
    updated = arena[key(AssetType.PROJECT, "p1")]
    assert updated is original
    assert updated.id == original_id
    assert updated.fingerprint != original_fingerprint
    assert updated.status_flag is StatusFlag.UPDATED
    assert updated.propagation_status is PropagationStatus.PENDING_UPDATE
    assert updated.attributes["Description"] == "desc-B"
    assert len(arena) == 2

    steady = reconcile_listing(arena, descriptor, SCOPE, _projects("desc-B"), now=_now)

    assert steady.unchanged == 2
    assert updated.status_flag is StatusFlag.ACTIVE
    assert updated.propagation_status is PropagationStatus.PENDING_UPDATE


def test_untracked_attributes_do_not_change_fingerprint(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    before = arena[key(AssetType.PROJECT, "p1")].fingerprint

    records = _projects()
    records[0] = source_record(
        "p1",
        "Proj-1",
        parent="s1",
        attributes={"Description": "desc-A", "Owner in Source": "alice", "Access Count": "42"},
    )
    result = reconcile_listing(arena, descriptor, SCOPE, records, now=_now)

    entity = arena[key(AssetType.PROJECT, "p1")]
    assert result.unchanged == 2
    assert entity.fingerprint == before
    assert entity.attributes["Access Count"] == "42"


def test_vanished_entity_cascades(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    reconcile_listing(arena, registry[AssetType.PROJECT], SCOPE, _projects(), now=_now)
    reconcile_listing(
        arena,
        registry[AssetType.WORKBOOK],
        SCOPE,
        [
            source_record("w1", "Sales", parent="p1"),
            source_record("w2", "Ops", parent="p2"),
        ],
        now=_now,
    )

    result = reconcile_listing(
        arena, registry[AssetType.PROJECT], SCOPE, _projects()[1:], now=_now
    )

    assert result.deleted == 1
    assert result.cascaded == 1
    assert arena[key(AssetType.PROJECT, "p1")].status_flag is StatusFlag.DELETED
    assert arena[key(AssetType.WORKBOOK, "w1")].status_flag is StatusFlag.DELETED
    assert not arena[key(AssetType.WORKBOOK, "w2")].is_deleted


def test_other_scopes_are_left_alone(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    reconcile_listing(arena, descriptor, "site-2", _projects(), now=_now)

    result = reconcile_listing(arena, descriptor, "site-2", [], now=_now)

    assert result.deleted == 2
    assert all(not entity.is_deleted for entity in arena.of_type(AssetType.PROJECT, scope=SCOPE))


def test_deleted_entity_stays_deleted_when_it_reappears(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    mark_synced(arena[key(AssetType.PROJECT, "p1")])
    reconcile_listing(arena, descriptor, SCOPE, _projects()[1:], now=_now)

    result = reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)

    entity = arena[key(AssetType.PROJECT, "p1")]
    assert result.reappeared == 1
    assert result.new == 0
    assert entity.status_flag is StatusFlag.DELETED
    assert entity.propagation_status is PropagationStatus.PENDING_DELETE

    revived = revive(arena, entity.key)

    assert revived is entity
    assert entity.status_flag is StatusFlag.UPDATED
    assert entity.propagation_status is PropagationStatus.PENDING_UPDATE


def test_deleted_entity_reappearing_with_changes_is_updated(
    registry: DescriptorRegistry,
) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    mark_synced(arena[key(AssetType.PROJECT, "p1")])
    reconcile_listing(arena, descriptor, SCOPE, _projects()[1:], now=_now)
    entity = arena[key(AssetType.PROJECT, "p1")]
    assert entity.propagation_status is PropagationStatus.PENDING_DELETE

    result = reconcile_listing(arena, descriptor, SCOPE, _projects("desc-B"), now=_now)

    assert result.reappeared == 0
    assert result.updated == 1
    assert entity.status_flag is StatusFlag.UPDATED
    assert entity.propagation_status is PropagationStatus.PENDING_UPDATE
    assert entity.attributes["Description"] == "desc-B"
    assert entity.updated_at == NOW


def test_retracted_entity_reappearing_with_changes_is_reimported(
    registry: DescriptorRegistry,
) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    reconcile_listing(arena, descriptor, SCOPE, [], now=_now)
    entity = arena[key(AssetType.PROJECT, "p1")]
    mark_synced(entity)

    reconcile_listing(arena, descriptor, SCOPE, _projects(owner="bob"), now=_now)

    assert entity.status_flag is StatusFlag.UPDATED
    assert entity.propagation_status is PropagationStatus.NOT_SYNCED


def test_revive_after_retraction_requires_full_import(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    descriptor = registry[AssetType.PROJECT]
    reconcile_listing(arena, descriptor, SCOPE, _projects(), now=_now)
    reconcile_listing(arena, descriptor, SCOPE, [], now=_now)
    entity = arena[key(AssetType.PROJECT, "p1")]
    mark_synced(entity)

    revive(arena, entity.key)

    assert entity.propagation_status is PropagationStatus.NOT_SYNCED


def test_revive_unknown_entity() -> None:
    with pytest.raises(UnknownEntityError):
        revive(EntityArena(), key(AssetType.PROJECT, "missing"))


def test_duplicate_records_keep_first(registry: DescriptorRegistry) -> None:
    arena = EntityArena()
    records = [*_projects(), source_record("p1", "Shadow")]

    result = reconcile_listing(arena, registry[AssetType.PROJECT], SCOPE, records, now=_now)

    assert result.duplicates == 1
    assert arena[key(AssetType.PROJECT, "p1")].name == "Proj-1"
