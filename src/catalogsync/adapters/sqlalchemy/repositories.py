"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from catalogsync.adapters.sqlalchemy.mappings import sync_entity_table
from catalogsync.domain.model import EntityArena, SyncEntity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from catalogsync.domain.model import AssetType, EntityKey
    from catalogsync.domain.ports.persistence import SyncEntityRepository


class SqlAlchemySyncEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncEntity) -> None:
        self.session.add(entity)

    def get(self, key: EntityKey) -> SyncEntity | None:
        stmt = (
            select(SyncEntity)
            .where(sync_entity_table.c.asset_type == key.asset_type)
            .where(sync_entity_table.c.external_id == key.external_id)
            .where(sync_entity_table.c.scope == key.scope)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list(self, asset_type: AssetType | None = None) -> Sequence[SyncEntity]:
        stmt = select(SyncEntity).order_by(
            sync_entity_table.c.asset_type,
            sync_entity_table.c.scope,
            sync_entity_table.c.external_id,
        )
        if asset_type is not None:
            stmt = stmt.where(sync_entity_table.c.asset_type == asset_type)
        return self.session.execute(stmt).scalars().all()

    def load_arena(self) -> EntityArena:
        """Load every row into an arena; mutations on its entities are flushed on commit."""

        return EntityArena(self.list())


if TYPE_CHECKING:

    def _repository_check(session: Session) -> SyncEntityRepository:
        return SqlAlchemySyncEntityRepository(session)
