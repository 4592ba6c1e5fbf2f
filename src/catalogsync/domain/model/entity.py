"""The generic mirrored entity.

Every asset kind shares this one class; kind-specific behaviour lives in the
:mod:`descriptors <catalogsync.domain.model.descriptors>` registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from .enums import PropagationStatus, StatusFlag
from .keys import EntityKey

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import AssetType
    from .keys import RelationRef


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class SyncEntity:
    """One mirrored asset and its change-tracking state.

    ``attributes`` may carry operational or cosmetic values (access counters,
    tags); only ``tracked_fields`` feed the fingerprint.
    """

    id: UUID = field(default_factory=new_id)
    asset_type: AssetType
    external_id: str
    scope: str
    name: str
    tracked_fields: tuple[str | None, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict[str, str])
    fingerprint: str | None = None
    status_flag: StatusFlag = StatusFlag.NEW
    propagation_status: PropagationStatus = PropagationStatus.NOT_SYNCED
    parent: EntityKey | None = None
    relations: tuple[RelationRef, ...] = ()
    updated_at: datetime | None = None

    @property
    def key(self) -> EntityKey:
        return EntityKey(self.asset_type, self.external_id, self.scope)

    @property
    def is_deleted(self) -> bool:
        return self.status_flag is StatusFlag.DELETED

    def __repr__(self) -> str:
        return (
            f"SyncEntity({self.key}, status={self.status_flag}, "
            f"propagation={self.propagation_status})"
        )
