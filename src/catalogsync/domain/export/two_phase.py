"""Relation-safe export of one asset type.

A type whose entities may reference each other is imported twice: first every
entity without relations (identity phase), then, once all identity chunks have
succeeded, every entity with its relations under the update-existing policy.
Because every possible relation target already exists when the relation phase
starts, chunk boundaries and job timing cannot cause "target not found" errors.
Types that cannot self-relate are imported in a single phase.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import (
    CatalogSyncError,
    PartialTypeFailure,
    TransientTransportError,
)

from .planner import plan
from .results import ChunkResult, ExportPhase, TypeExportResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import AssetTypeDescriptor

    from .poller import JobPoller
    from .records import ExportRecord

log = getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_TRANSIENT_RETRIES = 1


@dataclass(slots=True)
class TwoPhaseExporter:
    poller: JobPoller
    batch_size: int = DEFAULT_BATCH_SIZE
    transient_retries: int = DEFAULT_TRANSIENT_RETRIES

    async def export_type(
        self,
        descriptor: AssetTypeDescriptor,
        records: Sequence[ExportRecord],
        *,
        skipped: int = 0,
    ) -> TypeExportResult:
        """Import ``records`` of one type; chunk failures are reported, never raised.

        Planning errors (bad batch size, duplicate records) are raised before any
        network call.
        """

        asset_type = descriptor.asset_type
        result = TypeExportResult(asset_type=asset_type, skipped=skipped)
        full_chunks = plan(
            records,
            self.batch_size,
            key=_record_key,
            parent_of=_record_parent,
        )
        if not full_chunks:
            log.info(f"Nothing to export for {asset_type}")
            return result

        if not descriptor.can_self_relate:
            log.info(f"Exporting {len(records)} {asset_type} in {len(full_chunks)} chunk(s)")
            ok = await self._run_phase(result, ExportPhase.SINGLE, full_chunks)
            if not ok:
                result.message = f"{asset_type}: some chunks failed"
            return result

        identity_chunks = [[record.without_relations() for record in chunk] for chunk in full_chunks]
        log.info(
            f"Exporting {len(records)} {asset_type} in two phases of {len(full_chunks)} chunk(s)"
        )
        if not await self._run_phase(
            result, ExportPhase.IDENTITY, identity_chunks, stop_on_failure=True
        ):
            completed = sum(1 for chunk in result.chunks if chunk.success)
            failure = PartialTypeFailure(
                asset_type, completed_chunks=completed, total_chunks=len(identity_chunks)
            )
            log.error(str(failure))
            result.relations_skipped = True
            result.message = str(failure)
            result.confirmed.clear()
            return result

        # identity is established for every record; only the relation pass confirms sync
        result.confirmed.clear()
        if not await self._run_phase(result, ExportPhase.RELATIONS, full_chunks):
            result.message = f"{asset_type}: relation import failed for some chunks"
        return result

    async def _run_phase(
        self,
        result: TypeExportResult,
        phase: ExportPhase,
        chunks: Sequence[Sequence[ExportRecord]],
        *,
        stop_on_failure: bool = False,
    ) -> bool:
        all_ok = True
        for index, chunk in enumerate(chunks, start=1):
            chunk_result = await self._run_chunk(phase, index, len(chunks), chunk)
            result.chunks.append(chunk_result)
            if chunk_result.success:
                result.confirmed.extend(record.key for record in chunk)
                continue
            all_ok = False
            if stop_on_failure:
                break
        return all_ok

    async def _run_chunk(
        self,
        phase: ExportPhase,
        index: int,
        total: int,
        chunk: Sequence[ExportRecord],
    ) -> ChunkResult:
        asset_type = chunk[0].asset_type
        attempts_left = self.transient_retries
        while True:
            try:
                outcome = await self.poller.submit_and_await(chunk)
            except TransientTransportError as exc:
                if attempts_left > 0:
                    attempts_left -= 1
                    log.warning(
                        f"{asset_type} {phase} chunk {index}/{total}: transport error, "
                        f"retrying ({exc})"
                    )
                    continue
                return self._failed(phase, index, chunk, exc)
            except CatalogSyncError as exc:
                return self._failed(phase, index, chunk, exc)

            log.info(
                f"{asset_type} {phase} chunk {index}/{total} done: job={outcome.job_id}, "
                f"created={outcome.counts.created}, updated={outcome.counts.updated}, "
                f"relations={outcome.counts.relations_created}"
            )
            return ChunkResult(
                phase=phase,
                index=index,
                size=len(chunk),
                success=True,
                counts=outcome.counts,
                job_id=outcome.job_id,
                attempts=outcome.attempts,
            )

    @staticmethod
    def _failed(
        phase: ExportPhase,
        index: int,
        chunk: Sequence[ExportRecord],
        exc: CatalogSyncError,
    ) -> ChunkResult:
        log.error(f"{chunk[0].asset_type} {phase} chunk {index} failed: {exc}")
        return ChunkResult(
            phase=phase,
            index=index,
            size=len(chunk),
            success=False,
            job_id=getattr(exc, "job_id", None),
            attempts=getattr(exc, "attempts", 0),
            error=str(exc),
        )


def _record_key(record: ExportRecord) -> object:
    return record.key


def _record_parent(record: ExportRecord) -> object:
    return record.parent_key
