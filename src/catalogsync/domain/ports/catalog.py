"""Ports for the downstream governance catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.export.records import ExportRecord
    from catalogsync.domain.export.results import ImportCounts


class JobState(StrEnum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCESS, JobState.FAILURE)


@dataclass(frozen=True, slots=True)
class JobStatus:
    """Snapshot of an import job; ``result`` is only present on terminal success."""

    state: JobState
    result: ImportCounts | None = None
    diagnostics: str | None = None


@runtime_checkable
class CatalogClient(Protocol):
    """Asynchronous, job-based bulk import API.

    Existing entities are always updated in place; resubmitting one is not an error.
    """

    async def submit_batch(self, records: Sequence[ExportRecord]) -> str: ...

    async def job_status(self, job_id: str) -> JobStatus: ...

    async def delete_asset(self, record: ExportRecord) -> bool: ...


__all__ = ["CatalogClient", "JobState", "JobStatus"]
