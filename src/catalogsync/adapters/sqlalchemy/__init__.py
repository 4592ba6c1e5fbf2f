"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers, sync_entity_table
from .repositories import SqlAlchemySyncEntityRepository
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemySyncEntityRepository",
    "SqlAlchemyUnitOfWork",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "sync_entity_table",
]
