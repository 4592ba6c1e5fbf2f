"""In-memory stand-in for the downstream catalog's job API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.errors import CatalogSyncError, TransientTransportError
from catalogsync.domain.export import ImportCounts
from catalogsync.domain.ports.catalog import CatalogClient, JobState, JobStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.export import ExportRecord
    from catalogsync.domain.model import EntityKey


@dataclass(slots=True)
class FakeJob:
    job_id: str
    records: tuple[ExportRecord, ...]
    fail: bool = False
    polls: int = 0
    result: JobStatus | None = None


@dataclass
class FakeCatalogClient:
    """Jobs finish after ``polls_until_done`` status checks.

    Relations are applied at job completion and only succeed when their target
    already exists downstream (or arrives in the same batch). ``events`` records
    every call in order.
    """

    polls_until_done: int = 1
    failing_submissions: set[int] = field(default_factory=set[int])
    transport_errors: set[int] = field(default_factory=set[int])
    never_finish: bool = False
    delete_failures: set[EntityKey] = field(default_factory=set["EntityKey"])
    existing: dict[str, ExportRecord] = field(default_factory=dict[str, "ExportRecord"])
    events: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])
    submissions: list[tuple[ExportRecord, ...]] = field(
        default_factory=list[tuple["ExportRecord", ...]]
    )
    missing_relation_targets: list[str] = field(default_factory=list[str])
    _jobs: dict[str, FakeJob] = field(default_factory=dict[str, FakeJob])
    _submit_calls: int = 0

    async def submit_batch(self, records: Sequence[ExportRecord]) -> str:
        self._submit_calls += 1
        call = self._submit_calls
        if call in self.transport_errors:
            self.events.append(("transport-error", str(call)))
            raise TransientTransportError(f"connection reset on submission {call}")

        job_id = f"job-{len(self.submissions) + 1}"
        batch = tuple(records)
        self.submissions.append(batch)
        self._jobs[job_id] = FakeJob(job_id, batch, fail=call in self.failing_submissions)
        self.events.append(("submit", job_id))
        return job_id

    async def job_status(self, job_id: str) -> JobStatus:
        job = self._jobs[job_id]
        if job.result is not None:
            return job.result
        job.polls += 1
        if self.never_finish or job.polls < self.polls_until_done:
            return JobStatus(JobState.RUNNING)

        self.events.append(("done", job_id))
        if job.fail:
            job.result = JobStatus(JobState.FAILURE, diagnostics="import rejected")
        else:
            job.result = JobStatus(JobState.SUCCESS, result=self._apply(job.records))
        return job.result

    async def delete_asset(self, record: ExportRecord) -> bool:
        self.events.append(("delete", record.key.identifier))
        if record.key in self.delete_failures:
            raise CatalogSyncError(f"cannot delete {record.key}")
        return self.existing.pop(record.key.identifier, None) is not None

    def _apply(self, records: tuple[ExportRecord, ...]) -> ImportCounts:
        created = updated = relations = 0
        for record in records:
            if record.key.identifier in self.existing:
                updated += 1
            else:
                created += 1
            self.existing[record.key.identifier] = record
        for record in records:
            for relation in record.relations:
                if relation.target.identifier in self.existing:
                    relations += 1
                else:
                    self.missing_relation_targets.append(
                        f"{record.key.identifier} -> {relation.target.identifier}"
                    )
        return ImportCounts(created=created, updated=updated, relations_created=relations)


_client_check: CatalogClient = FakeCatalogClient()


async def no_sleep(_seconds: float) -> None:
    return None
