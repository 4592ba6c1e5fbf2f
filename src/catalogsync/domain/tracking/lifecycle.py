"""Status-flag state machine."""

from __future__ import annotations

from catalogsync.domain.model import StatusFlag


def classify(
    stored_fingerprint: str | None,
    fresh_fingerprint: str,
    current_status: StatusFlag | None,
) -> StatusFlag:
    """Return the next status for an entity seen in the current listing.

    DELETED is sticky: an unchanged fingerprint never revives a deleted entity,
    a changed one does.
    """

    if stored_fingerprint is None:
        return StatusFlag.NEW
    if stored_fingerprint != fresh_fingerprint:
        return StatusFlag.UPDATED
    if current_status is StatusFlag.DELETED:
        return StatusFlag.DELETED
    return StatusFlag.ACTIVE


def classify_absent(current_status: StatusFlag | None) -> StatusFlag:
    """Return the next status for a known entity missing from a full listing."""

    _ = current_status
    return StatusFlag.DELETED
