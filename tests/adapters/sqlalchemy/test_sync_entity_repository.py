from __future__ import annotations

from collections.abc import Callable  # noqa: TC003
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError

from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    shutdown,
    startup,
)
from catalogsync.domain.model import (
    AssetType,
    PropagationStatus,
    RelationRef,
    StatusFlag,
    SyncEntity,
)
from tests.helpers.entities import key, make_entity

UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


def _project() -> SyncEntity:
    entity = make_entity(
        AssetType.PROJECT,
        "p1",
        name="Finance",
        parent=key(AssetType.SITE, "s1"),
        relations=(RelationRef("parent project", key(AssetType.PROJECT, "p0", "site-0")),),
        status=StatusFlag.UPDATED,
        propagation=PropagationStatus.PENDING_UPDATE,
    )
    entity.tracked_fields = ("Finance", None, "alice", "site-1>s1")
    entity.attributes = {"Description": "Numbers", "Access Count": "12"}
    entity.updated_at = datetime(2024, 3, 1, 8, 30, tzinfo=UTC)
    return entity


def test_entity_round_trip(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    original = _project()
    with sqlite_unit_of_work() as uow:
        uow.repositories.entities.add(original)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.entities.get(key(AssetType.PROJECT, "p1"))

        assert loaded is not None
        assert loaded.id == original.id
        assert loaded.name == "Finance"
        assert loaded.status_flag is StatusFlag.UPDATED
        assert loaded.propagation_status is PropagationStatus.PENDING_UPDATE
        assert loaded.parent == key(AssetType.SITE, "s1")
        assert loaded.relations == original.relations
        assert loaded.tracked_fields == ("Finance", None, "alice", "site-1>s1")
        assert loaded.attributes == {"Description": "Numbers", "Access Count": "12"}
        assert loaded.fingerprint == "0" * 64
        assert loaded.updated_at == datetime(2024, 3, 1, 8, 30, tzinfo=UTC)


def test_arena_mutations_are_flushed_on_commit(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.entities.add(_project())
        uow.repositories.entities.add(make_entity(AssetType.SITE, "s1"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        arena = uow.repositories.entities.load_arena()
        assert len(arena) == 2
        assert [child.external_id for child in arena.children_of(key(AssetType.SITE, "s1"))] == [
            "p1"
        ]
        arena[key(AssetType.PROJECT, "p1")].propagation_status = PropagationStatus.SYNCED
        uow.commit()

    with sqlite_unit_of_work() as uow:
        projects = uow.repositories.entities.list(AssetType.PROJECT)
        assert [entity.propagation_status for entity in projects] == [PropagationStatus.SYNCED]


def test_uncommitted_changes_are_discarded(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.entities.add(_project())

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.entities.list() == []


def test_identity_is_unique_per_scope(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.entities.add(make_entity(AssetType.PROJECT, "p1"))
        uow.repositories.entities.add(make_entity(AssetType.PROJECT, "p1", scope="site-2"))
        uow.commit()

    with pytest.raises(IntegrityError), sqlite_unit_of_work() as uow:
        uow.repositories.entities.add(make_entity(AssetType.PROJECT, "p1"))
        uow.commit()


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        startup(engine=engine_a, force=True)

        with pytest.raises(StartupError):
            startup(engine=engine_b)

        startup(engine=engine_b, force=True)
        assert configured_engine() is engine_b
    finally:
        shutdown()
