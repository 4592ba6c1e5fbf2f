"""Ports for persisting mirrored entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import AssetType, EntityArena, EntityKey, SyncEntity


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class SyncEntityRepository(Repository["SyncEntity"], Protocol):
    """Persistence contract for mirrored entities; rows are never physically removed."""

    def get(self, key: EntityKey) -> SyncEntity | None: ...

    def list(self, asset_type: AssetType | None = None) -> Sequence[SyncEntity]: ...

    def load_arena(self) -> EntityArena: ...


__all__ = ["Repository", "SyncEntityRepository"]
