"""Multi-type export run: pending entities of every asset type to the catalog.

Types are exported concurrently up to ``concurrency``. A type starts only
after the types its relations point at have finished, so cross-type relation
targets are always present. Deletions are collected along the way and run
once every type has reported its import.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.tracking import mark_synced, needs_import, needs_retraction

from .deletions import DeferredDeletionCoordinator
from .planner import check_batch_size
from .poller import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL_SECONDS, JobPoller, Sleep
from .records import build_record
from .results import ExportRunResult, TypeExportResult
from .two_phase import DEFAULT_BATCH_SIZE, DEFAULT_TRANSIENT_RETRIES, TwoPhaseExporter

if TYPE_CHECKING:
    from collections.abc import Collection

    from catalogsync.domain.model import (
        AssetType,
        AssetTypeDescriptor,
        DescriptorRegistry,
        EntityArena,
    )
    from catalogsync.domain.ports.catalog import CatalogClient

log = getLogger(__name__)

DEFAULT_CONCURRENCY = 2


@dataclass(slots=True)
class ExportRunner:
    client: CatalogClient
    registry: DescriptorRegistry
    batch_size: int = DEFAULT_BATCH_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    concurrency: int = DEFAULT_CONCURRENCY
    transient_retries: int = DEFAULT_TRANSIENT_RETRIES
    sleep: Sleep = field(default=asyncio.sleep)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        check_batch_size(self.batch_size)

    async def run(
        self,
        arena: EntityArena,
        *,
        asset_types: Collection[AssetType] | None = None,
    ) -> ExportRunResult:
        """Export every pending entity in ``arena`` and record confirmed propagation.

        Chunk and type failures end up in the returned result; nothing here raises
        for them.
        """

        descriptors = [
            descriptor
            for descriptor in self.registry
            if asset_types is None or descriptor.asset_type in asset_types
        ]
        exporter = TwoPhaseExporter(
            poller=JobPoller(
                self.client,
                poll_interval=self.poll_interval,
                max_attempts=self.max_poll_attempts,
                sleep=self.sleep,
            ),
            batch_size=self.batch_size,
            transient_retries=self.transient_retries,
        )
        deletions = DeferredDeletionCoordinator()
        finished = {descriptor.asset_type: asyncio.Event() for descriptor in descriptors}
        semaphore = asyncio.Semaphore(self.concurrency)

        async def export_one(descriptor: AssetTypeDescriptor) -> TypeExportResult:
            try:
                for dependency in descriptor.depends_on:
                    event = finished.get(dependency)
                    if event is not None:
                        await event.wait()
                async with semaphore:
                    return await self._export_type(arena, descriptor, exporter, deletions)
            finally:
                finished[descriptor.asset_type].set()

        log.info(f"Starting export of {len(descriptors)} asset type(s)")
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(export_one(descriptor)) for descriptor in descriptors]

        result = ExportRunResult(types=[task.result() for task in tasks])
        deletions.close()
        result.deletions = await deletions.drain_and_execute(self.client)

        for type_result in result.types:
            for key in type_result.confirmed:
                mark_synced(arena[key])
        for key in result.deletions.retracted:
            mark_synced(arena[key])

        result.message = _summarize(result)
        log.info(
            f"Export finished: success={result.success}, created={result.created}, "
            f"updated={result.updated}, relations={result.relations_created}, "
            f"skipped={result.skipped}, deleted={result.deleted}"
        )
        return result

    async def _export_type(
        self,
        arena: EntityArena,
        descriptor: AssetTypeDescriptor,
        exporter: TwoPhaseExporter,
        deletions: DeferredDeletionCoordinator,
    ) -> TypeExportResult:
        entities = arena.of_type(descriptor.asset_type)
        to_import = [build_record(entity, descriptor) for entity in entities if needs_import(entity)]
        to_retract = [
            build_record(entity, descriptor) for entity in entities if needs_retraction(entity)
        ]
        skipped = len(entities) - len(to_import) - len(to_retract)
        await deletions.add(to_retract)

        try:
            return await exporter.export_type(descriptor, to_import, skipped=skipped)
        except Exception as exc:
            log.exception(f"Export of {descriptor.asset_type} aborted")
            return TypeExportResult(
                asset_type=descriptor.asset_type,
                skipped=skipped,
                message=f"{descriptor.asset_type}: {exc}",
                relations_skipped=True,
            )


async def run_export(
    arena: EntityArena,
    registry: DescriptorRegistry,
    client: CatalogClient,
    *,
    asset_types: Collection[AssetType] | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
    concurrency: int = DEFAULT_CONCURRENCY,
    transient_retries: int = DEFAULT_TRANSIENT_RETRIES,
    sleep: Sleep = asyncio.sleep,
) -> ExportRunResult:
    runner = ExportRunner(
        client,
        registry,
        batch_size=batch_size,
        poll_interval=poll_interval,
        max_poll_attempts=max_poll_attempts,
        concurrency=concurrency,
        transient_retries=transient_retries,
        sleep=sleep,
    )
    return await runner.run(arena, asset_types=asset_types)


def _summarize(result: ExportRunResult) -> str | None:
    if result.success:
        return None
    problems = [
        type_result.message or f"{type_result.asset_type}: export failed"
        for type_result in result.types
        if not type_result.success
    ]
    if result.deletions.failures:
        problems.append(f"{len(result.deletions.failures)} deletion(s) failed")
    return "; ".join(problems)
