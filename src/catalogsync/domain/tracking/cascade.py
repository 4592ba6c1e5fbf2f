"""Cascading soft deletion down the containment hierarchy."""

from __future__ import annotations

from collections import deque
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import UnknownEntityError
from catalogsync.domain.model import StatusFlag

from .propagation import apply_status

if TYPE_CHECKING:
    from catalogsync.domain.model import (
        EntityArena,
        EntityKey,
        PropagationStatus,
        SyncEntity,
    )

log = getLogger(__name__)


def collect_subtree(arena: EntityArena, root: EntityKey) -> list[SyncEntity]:
    """Return ``root`` and its descendants, breadth-first, one level at a time."""

    root_entity = arena.get(root)
    if root_entity is None:
        raise UnknownEntityError(root)

    ordered: list[SyncEntity] = [root_entity]
    visited: set[EntityKey] = {root}
    level: deque[SyncEntity] = deque([root_entity])
    while level:
        next_level: deque[SyncEntity] = deque()
        for entity in level:
            for child in arena.children_of(entity.key):
                if child.key in visited:
                    continue
                visited.add(child.key)
                ordered.append(child)
                next_level.append(child)
        level = next_level
    return ordered


def cascade_delete(arena: EntityArena, root: EntityKey) -> list[EntityKey]:
    """Mark ``root`` and every reachable descendant DELETED as one unit.

    The subtree is resolved before anything is mutated; if a mutation fails, every
    entity already touched is restored and the error propagates.
    Returns the keys whose state changed.
    """

    subtree = collect_subtree(arena, root)
    snapshot: list[tuple[SyncEntity, StatusFlag, PropagationStatus]] = []
    changed: list[EntityKey] = []
    try:
        for entity in subtree:
            snapshot.append((entity, entity.status_flag, entity.propagation_status))
            if apply_status(entity, StatusFlag.DELETED):
                changed.append(entity.key)
    except Exception:
        for entity, status, propagation in snapshot:
            entity.status_flag = status
            entity.propagation_status = propagation
        log.exception(f"Cascade delete from {root} rolled back")
        raise

    log.info(f"Cascade delete from {root}: {len(changed)} of {len(subtree)} entities changed")
    return changed
