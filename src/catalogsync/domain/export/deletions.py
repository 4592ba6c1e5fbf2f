"""Deferred retraction of deleted entities from the downstream catalog."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import CatalogSyncError

from .results import DeletionResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.ports.catalog import CatalogClient

    from .records import ExportRecord

log = getLogger(__name__)


class DeferredDeletionCoordinator:
    """Collects delete candidates from concurrent type exports.

    Nothing is deleted until :meth:`close` has been called, i.e. after every
    type has reported its import. A forward reference from one type into
    another therefore never points at an asset that vanished mid-run.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._pending: list[ExportRecord] = []
        self._closed = False
        self._drained = False

    async def add(self, records: Iterable[ExportRecord]) -> None:
        async with self._lock:
            if self._closed:
                raise RuntimeError("Deletion accumulator already closed")
            self._pending.extend(records)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> tuple[ExportRecord, ...]:
        return tuple(self._pending)

    async def drain_and_execute(self, client: CatalogClient) -> DeletionResult:
        """Delete every accumulated record, best effort; failures are reported, not raised."""

        if not self._closed:
            raise RuntimeError("Deletions can only run after every type finished its import")
        async with self._lock:
            if self._drained:
                raise RuntimeError("Deletion accumulator already drained")
            self._drained = True
            records = list(self._pending)
            self._pending.clear()

        result = DeletionResult()
        if not records:
            return result

        log.info(f"Retracting {len(records)} deleted entities downstream")
        for record in records:
            result.attempted += 1
            try:
                removed = await client.delete_asset(record)
            except CatalogSyncError as exc:
                log.warning(f"Could not delete {record.key}: {exc}")
                result.failures.append(f"{record.key}: {exc}")
                continue
            except Exception as exc:
                log.exception(f"Unexpected error deleting {record.key}")
                result.failures.append(f"{record.key}: {exc}")
                continue
            if removed:
                result.deleted += 1
            else:
                log.info(f"{record.key} was not present downstream")
            result.retracted.append(record.key)

        log.info(
            "Deletion pass done: %d deleted, %d failed of %d",
            result.deleted,
            len(result.failures),
            result.attempted,
        )
        return result
