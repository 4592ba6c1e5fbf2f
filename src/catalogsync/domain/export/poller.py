"""Submit one batch as an import job and wait for its terminal state."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import JobFailureError, JobTimeoutError
from catalogsync.domain.ports.catalog import JobState

from .results import JobOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.ports.catalog import CatalogClient

    from .records import ExportRecord

log = getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_MAX_POLL_ATTEMPTS = 150

Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class JobPoller:
    """Blocks cooperatively on one job; the sleep between polls is the only suspension point.

    Transport errors raised by the client propagate unchanged; retrying them is the
    caller's decision.
    """

    client: CatalogClient
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    sleep: Sleep = field(default=asyncio.sleep)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be non-negative")

    async def submit_and_await(self, batch: Sequence[ExportRecord]) -> JobOutcome:
        job_id = await self.client.submit_batch(batch)
        log.debug(f"Submitted job {job_id} with {len(batch)} records")

        for attempt in range(1, self.max_attempts + 1):
            await self.sleep(self.poll_interval)
            status = await self.client.job_status(job_id)
            log.debug(f"Job {job_id} poll {attempt}: {status.state}")

            if status.state is JobState.SUCCESS:
                if status.result is None:
                    raise JobFailureError(job_id, "terminal success without a result payload")
                return JobOutcome(job_id=job_id, counts=status.result, attempts=attempt)
            if status.state is JobState.FAILURE:
                raise JobFailureError(job_id, status.diagnostics)

        raise JobTimeoutError(job_id, self.max_attempts)
