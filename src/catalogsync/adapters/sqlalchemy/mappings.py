"""SQLAlchemy mapping metadata for mirrored entities."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalogsync.domain.model import (
    AssetType,
    EntityKey,
    PropagationStatus,
    RelationRef,
    StatusFlag,
    SyncEntity,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _key_to_json(key: EntityKey) -> dict[str, str]:
    return {"type": key.asset_type.value, "id": key.external_id, "scope": key.scope}


def _key_from_json(payload: dict[str, Any]) -> EntityKey:
    return EntityKey(AssetType(payload["type"]), str(payload["id"]), str(payload["scope"]))


class TrackedFieldsType(TypeDecorator[tuple[str | None, ...]]):
    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[str | None, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str | None, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        return tuple(cast(list[str | None], loaded))


class AttributeMapType(TypeDecorator[dict[str, str]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, str]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        return {str(key): str(item) for key, item in cast(dict[str, Any], loaded).items()}


class EntityKeyType(TypeDecorator[EntityKey]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: EntityKey | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(_key_to_json(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> EntityKey | None:
        _ = dialect
        if value is None:
            return None
        return _key_from_json(json.loads(value))


class RelationListType(TypeDecorator[tuple[RelationRef, ...]]):
    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[RelationRef, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [
            {"name": relation.name, "target": _key_to_json(relation.target)} for relation in value
        ]
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[RelationRef, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        return tuple(
            RelationRef(str(item["name"]), _key_from_json(item["target"]))
            for item in cast(list[dict[str, Any]], loaded)
        )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

sync_entity_table = Table(
    "sync_entity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("asset_type", Enum(AssetType, native_enum=False), nullable=False),
    Column("external_id", String, nullable=False),
    Column("scope", String, nullable=False),
    Column("name", String, nullable=False),
    Column("tracked_fields", TrackedFieldsType, nullable=False),
    Column("attributes", AttributeMapType, nullable=False),
    Column("fingerprint", String(64), nullable=True),
    Column("status_flag", Enum(StatusFlag, native_enum=False), nullable=False),
    Column("propagation_status", Enum(PropagationStatus, native_enum=False), nullable=False),
    Column("parent", EntityKeyType, nullable=True),
    Column("relations", RelationListType, nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
    UniqueConstraint("asset_type", "external_id", "scope", name="uq_sync_entity_identity"),
    Index("ix_sync_entity_propagation", "asset_type", "propagation_status"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(SyncEntity, sync_entity_table)

    configure_mappers()
    return mapper_registry
