"""Error taxonomy for change tracking and catalog export."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model import AssetType, EntityKey


class CatalogSyncError(RuntimeError):
    """Base class for domain errors raised by catalogsync."""


class UnknownEntityError(CatalogSyncError, KeyError):
    """Raised when an operation targets an entity that is not in the arena."""

    def __init__(self, key: EntityKey) -> None:
        super().__init__(f"Unknown entity: {key}")
        self.key = key

    def __str__(self) -> str:
        return str(self.args[0])


class PlanningError(CatalogSyncError, ValueError):
    """Raised before any network call when a batch plan cannot be built."""


class TransientTransportError(CatalogSyncError):
    """Network or connection failure while submitting or polling a job.

    Not retried inside the poller; callers may retry the whole chunk.
    """


class JobTimeoutError(CatalogSyncError):
    """Raised when the polling budget is exhausted before the job terminated."""

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(f"Job {job_id} did not finish after {attempts} polls")
        self.job_id = job_id
        self.attempts = attempts


class JobFailureError(CatalogSyncError):
    """Raised when the downstream catalog reports a terminal failure for a job."""

    def __init__(self, job_id: str, diagnostics: str | None = None) -> None:
        detail = f": {diagnostics}" if diagnostics else ""
        super().__init__(f"Job {job_id} failed{detail}")
        self.job_id = job_id
        self.diagnostics = diagnostics


class PartialTypeFailure(CatalogSyncError):
    """Identity-establishing import failed part-way for one asset type.

    Carried on the type's export result; the relation phase is skipped.
    """

    def __init__(self, asset_type: AssetType, *, completed_chunks: int, total_chunks: int) -> None:
        super().__init__(
            f"Identity phase for {asset_type} stopped after "
            f"{completed_chunks}/{total_chunks} chunks; relations were not imported"
        )
        self.asset_type = asset_type
        self.completed_chunks = completed_chunks
        self.total_chunks = total_chunks
