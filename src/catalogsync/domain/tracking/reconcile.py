"""Apply one full source listing to the local arena."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import UnknownEntityError
from catalogsync.domain.model import (
    EntityKey,
    PropagationStatus,
    RelationRef,
    StatusFlag,
    SyncEntity,
)

from .cascade import cascade_delete
from .fingerprint import fingerprint
from .lifecycle import classify, classify_absent
from .propagation import apply_status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from catalogsync.domain.model import AssetType, AssetTypeDescriptor, EntityArena
    from catalogsync.domain.ports.source import SourceRecord, SourceRef

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class ReconcileResult:
    """Counts for one reconciliation pass over one ``(asset_type, scope)`` listing."""

    asset_type: AssetType
    scope: str
    new: int = 0
    updated: int = 0
    unchanged: int = 0
    deleted: int = 0
    cascaded: int = 0
    reappeared: int = 0
    duplicates: int = 0

    @property
    def total(self) -> int:
        return self.new + self.updated + self.unchanged


def reconcile_listing(
    arena: EntityArena,
    descriptor: AssetTypeDescriptor,
    scope: str,
    records: Iterable[SourceRecord],
    *,
    now: Callable[[], datetime] = _utcnow,
) -> ReconcileResult:
    """Classify every record of a full listing and soft-delete whatever vanished.

    An entity already DELETED that reappears with an unchanged fingerprint stays
    DELETED and is only counted in ``reappeared``; reviving it is an explicit act
    (:func:`revive`). One that reappears with a changed fingerprint is UPDATED
    and queued for re-import.
    """

    result = ReconcileResult(asset_type=descriptor.asset_type, scope=scope)
    seen: set[EntityKey] = set()
    timestamp = now()

    for record in records:
        key = EntityKey(descriptor.asset_type, record.external_id, scope)
        if key in seen:
            log.warning(f"Duplicate {key} in source listing, keeping the first occurrence")
            result.duplicates += 1
            continue
        seen.add(key)

        parent = _resolve_parent(descriptor, record, scope)
        relations = _resolve_relations(descriptor, record, scope)
        tracked = descriptor.tracked_values(
            name=record.name,
            attributes=record.attributes,
            parent=parent,
            relations=relations,
        )
        fresh = fingerprint(tracked)
        attributes = {name: value for name, value in record.attributes.items() if value}

        existing = arena.get(key)
        if existing is None:
            arena.add(
                SyncEntity(
                    asset_type=descriptor.asset_type,
                    external_id=record.external_id,
                    scope=scope,
                    name=record.name,
                    tracked_fields=tracked,
                    attributes=attributes,
                    fingerprint=fresh,
                    status_flag=classify(None, fresh, None),
                    propagation_status=PropagationStatus.NOT_SYNCED,
                    parent=parent,
                    relations=relations,
                    updated_at=timestamp,
                )
            )
            result.new += 1
            continue

        status = classify(existing.fingerprint, fresh, existing.status_flag)
        if status is StatusFlag.DELETED:
            log.warning(f"{key} reappeared unchanged in the source listing but stays deleted")
            result.reappeared += 1
            continue

        if status is StatusFlag.UPDATED:
            if existing.is_deleted:
                log.info(f"{key} reappeared with changes, reopening it")
                _reopen(existing)
                existing.updated_at = timestamp
            existing.name = record.name
            existing.tracked_fields = tracked
            existing.fingerprint = fresh
            existing.relations = relations
            arena.set_parent(existing, parent)
            result.updated += 1
        else:
            result.unchanged += 1

        changed = apply_status(existing, status)
        if existing.attributes != attributes:
            existing.attributes = attributes
            changed = True
        if changed:
            existing.updated_at = timestamp

    for entity in arena.of_type(descriptor.asset_type, scope=scope):
        if entity.key in seen or entity.is_deleted:
            continue
        if classify_absent(entity.status_flag) is StatusFlag.DELETED:
            touched = cascade_delete(arena, entity.key)
            for touched_key in touched:
                arena[touched_key].updated_at = timestamp
            result.deleted += 1
            result.cascaded += max(len(touched) - 1, 0)

    log.info(
        f"Reconciled {descriptor.asset_type} in scope {scope!r}: new={result.new}, "
        f"updated={result.updated}, unchanged={result.unchanged}, deleted={result.deleted}, "
        f"cascaded={result.cascaded}, reappeared={result.reappeared}"
    )
    return result


def revive(arena: EntityArena, key: EntityKey) -> SyncEntity:
    """Operator action: bring a DELETED entity back so the next export re-imports it."""

    entity = arena.get(key)
    if entity is None:
        raise UnknownEntityError(key)
    if not entity.is_deleted:
        return entity

    _reopen(entity)
    entity.updated_at = _utcnow()
    log.info(f"Revived {key}")
    return entity


def _reopen(entity: SyncEntity) -> None:
    entity.status_flag = StatusFlag.UPDATED
    match entity.propagation_status:
        case PropagationStatus.PENDING_DELETE:
            entity.propagation_status = PropagationStatus.PENDING_UPDATE
        case PropagationStatus.SYNCED:
            # the downstream asset was already retracted
            entity.propagation_status = PropagationStatus.NOT_SYNCED
        case _:
            pass


def _resolve_ref(ref: SourceRef, asset_type: AssetType, scope: str) -> EntityKey:
    return EntityKey(asset_type, ref.external_id, ref.scope if ref.scope is not None else scope)


def _resolve_parent(
    descriptor: AssetTypeDescriptor,
    record: SourceRecord,
    scope: str,
) -> EntityKey | None:
    if record.parent is None:
        return None
    if descriptor.parent_type is None:
        log.debug(f"Ignoring parent of top-level {descriptor.asset_type} {record.external_id}")
        return None
    return _resolve_ref(record.parent, descriptor.parent_type, scope)


def _resolve_relations(
    descriptor: AssetTypeDescriptor,
    record: SourceRecord,
    scope: str,
) -> tuple[RelationRef, ...]:
    unknown = set(record.relations) - {relation.name for relation in descriptor.relations}
    for name in sorted(unknown):
        log.warning(f"Ignoring unknown relation {name!r} on {descriptor.asset_type}")

    resolved: list[RelationRef] = []
    for relation in descriptor.relations:
        for ref in record.relations.get(relation.name, ()):
            resolved.append(
                RelationRef(relation.name, _resolve_ref(ref, relation.target_type, scope))
            )
    return tuple(resolved)
