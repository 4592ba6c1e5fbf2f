"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.catalog import HttpCatalogClient
from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from catalogsync.config import get_catalog_config, get_export_config
from catalogsync.domain.export import ExportRunner
from catalogsync.domain.model import default_registry
from catalogsync.domain.ports.unit_of_work import SyncUnitOfWork
from catalogsync.domain.tracking import cascade_delete, reconcile_listing, revive

if TYPE_CHECKING:
    from collections.abc import Collection

    from catalogsync.config import ExportConfig
    from catalogsync.domain.export import ExportRunResult
    from catalogsync.domain.model import (
        AssetType,
        DescriptorRegistry,
        EntityArena,
        EntityKey,
        SyncEntity,
    )
    from catalogsync.domain.ports.catalog import CatalogClient
    from catalogsync.domain.ports.source import SourceListing
    from catalogsync.domain.tracking import ReconcileResult

UnitOfWorkFactory = Callable[[], SyncUnitOfWork]

log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def reconcile_source(
    *,
    source: SourceListing,
    registry: DescriptorRegistry | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    asset_types: Collection[AssetType] | None = None,
) -> list[ReconcileResult]:
    """Apply the full listings of ``source`` to the stored mirror.

    Types are processed in registry order so containers are classified before
    their contents.
    """

    effective_registry = registry or default_registry()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()

    results: list[ReconcileResult] = []
    with effective_uow() as uow:
        repository = uow.repositories.entities
        arena = repository.load_arena()
        known = {entity.key for entity in arena}

        for descriptor in effective_registry:
            if asset_types is not None and descriptor.asset_type not in asset_types:
                continue
            for scope in source.scopes(descriptor.asset_type):
                records = source.list_entities(descriptor.asset_type, scope)
                results.append(reconcile_listing(arena, descriptor, scope, records))

        for entity in arena:
            if entity.key not in known:
                repository.add(entity)
        uow.commit()

    log.info(
        f"Finished reconciliation of {len(results)} listing(s): "
        f"new={sum(r.new for r in results)}, updated={sum(r.updated for r in results)}, "
        f"deleted={sum(r.deleted for r in results)}"
    )
    return results


async def _run_export(
    runner: ExportRunner,
    arena: EntityArena,
    asset_types: Collection[AssetType] | None,
    owned: HttpCatalogClient | None,
) -> ExportRunResult:
    try:
        return await runner.run(arena, asset_types=asset_types)
    finally:
        if owned is not None:
            await owned.aclose()


def export_pending(
    *,
    client: CatalogClient | None = None,
    registry: DescriptorRegistry | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ExportConfig | None = None,
    asset_types: Collection[AssetType] | None = None,
) -> ExportRunResult:
    """Push every pending entity to the catalog and persist confirmed propagation."""

    effective_config = config or get_export_config()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    owned: HttpCatalogClient | None = None
    if client is None:
        owned = HttpCatalogClient(get_catalog_config())
        client = owned

    runner = ExportRunner(
        client=client,
        registry=registry or default_registry(),
        batch_size=effective_config.batch_size,
        poll_interval=effective_config.poll_interval,
        max_poll_attempts=effective_config.max_poll_attempts,
        concurrency=effective_config.concurrency,
        transient_retries=effective_config.transient_retries,
    )
    log.info(
        "Starting export: batch_size=%s, concurrency=%s, poll_interval=%s",
        effective_config.batch_size,
        effective_config.concurrency,
        effective_config.poll_interval,
    )

    with effective_uow() as uow:
        arena = uow.repositories.entities.load_arena()
        result = asyncio.run(_run_export(runner, arena, asset_types, owned))
        uow.commit()

    if result.success:
        log.info("Export completed successfully")
    else:
        log.warning(f"Export finished with failures: {result.message}")
    return result


def cascade_entity(
    key: EntityKey,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[EntityKey]:
    """Operator action: soft-delete ``key`` and everything below it."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        arena = uow.repositories.entities.load_arena()
        changed = cascade_delete(arena, key)
        uow.commit()
    return changed


def revive_entity(
    key: EntityKey,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncEntity:
    """Operator action: bring a deleted entity back for the next export."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        arena = uow.repositories.entities.load_arena()
        revived = revive(arena, key)
        uow.commit()
    return revived
