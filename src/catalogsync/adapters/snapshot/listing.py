"""Source listing backed by a JSON snapshot of the upstream catalog."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from catalogsync.domain.ports.source import SourceListing, SourceRecord, SourceRef

from .schema import EntityPayload, RefPayload, SnapshotPayload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import AssetType

log = getLogger(__name__)


class SnapshotListing:
    """Full listings read from one snapshot document.

    Only scopes present in the snapshot are reported; an empty listing for a
    scope means every entity of that type in the scope has vanished.
    """

    def __init__(self, payload: SnapshotPayload) -> None:
        self._listings: dict[tuple[AssetType, str], list[SourceRecord]] = {}
        for listing in payload.listings:
            key = (listing.asset_type, listing.scope)
            records = self._listings.setdefault(key, [])
            records.extend(_to_record(entity) for entity in listing.entities)

    @classmethod
    def from_path(cls, path: str | Path) -> SnapshotListing:
        text = Path(path).read_text(encoding="utf-8")
        payload = SnapshotPayload.model_validate_json(text)
        log.info(f"Loaded snapshot {path} with {len(payload.listings)} listing(s)")
        return cls(payload)

    @classmethod
    def from_dict(cls, data: object) -> SnapshotListing:
        return cls(SnapshotPayload.model_validate(data))

    def list_entities(self, asset_type: AssetType, scope: str) -> Sequence[SourceRecord]:
        return tuple(self._listings.get((asset_type, scope), ()))

    def scopes(self, asset_type: AssetType) -> Sequence[str]:
        return tuple(scope for listed_type, scope in self._listings if listed_type == asset_type)


def _to_ref(payload: RefPayload) -> SourceRef:
    return SourceRef(external_id=payload.external_id, scope=payload.scope)


def _to_record(payload: EntityPayload) -> SourceRecord:
    return SourceRecord(
        external_id=payload.external_id,
        name=payload.name,
        attributes=dict(payload.attributes),
        parent=_to_ref(payload.parent) if payload.parent is not None else None,
        relations={
            name: tuple(_to_ref(target) for target in targets)
            for name, targets in payload.relations.items()
        },
    )


if TYPE_CHECKING:
    _listing_check: SourceListing = SnapshotListing(SnapshotPayload())
