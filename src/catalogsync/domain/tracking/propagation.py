"""Propagation-status projection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import PropagationStatus, StatusFlag

if TYPE_CHECKING:
    from catalogsync.domain.model import SyncEntity

_RETRACTABLE = frozenset({PropagationStatus.SYNCED, PropagationStatus.PENDING_UPDATE})


def project(
    new_status: StatusFlag,
    current: PropagationStatus | None,
) -> PropagationStatus:
    """Derive the next propagation status from a status-flag transition.

    This machine never advances to SYNCED; only a confirmed export does that.
    """

    current = current or PropagationStatus.NOT_SYNCED
    match new_status:
        case StatusFlag.NEW:
            return PropagationStatus.NOT_SYNCED
        case StatusFlag.UPDATED:
            if current is PropagationStatus.SYNCED:
                return PropagationStatus.PENDING_UPDATE
            return current
        case StatusFlag.DELETED:
            if current in _RETRACTABLE:
                return PropagationStatus.PENDING_DELETE
            return current
        case StatusFlag.ACTIVE:
            return current


def apply_status(entity: SyncEntity, new_status: StatusFlag) -> bool:
    """Set ``new_status`` on ``entity`` and project its propagation status.

    Returns whether anything changed.
    """

    next_propagation = project(new_status, entity.propagation_status)
    changed = (
        entity.status_flag is not new_status or entity.propagation_status is not next_propagation
    )
    entity.status_flag = new_status
    entity.propagation_status = next_propagation
    return changed


def mark_synced(entity: SyncEntity) -> None:
    """Record that the downstream catalog confirmed the entity's current state."""

    entity.propagation_status = PropagationStatus.SYNCED


def needs_import(entity: SyncEntity) -> bool:
    return not entity.is_deleted and entity.propagation_status in (
        PropagationStatus.NOT_SYNCED,
        PropagationStatus.PENDING_UPDATE,
    )


def needs_retraction(entity: SyncEntity) -> bool:
    return entity.propagation_status is PropagationStatus.PENDING_DELETE
