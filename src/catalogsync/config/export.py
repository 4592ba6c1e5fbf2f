"""Export engine defaults and environment overrides."""

from __future__ import annotations

from dataclasses import dataclass

from catalogsync.domain.export.poller import (
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
)
from catalogsync.domain.export.runner import DEFAULT_CONCURRENCY
from catalogsync.domain.export.two_phase import DEFAULT_BATCH_SIZE, DEFAULT_TRANSIENT_RETRIES

from .env import env_float, env_int


@dataclass(frozen=True, slots=True)
class ExportConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    concurrency: int = DEFAULT_CONCURRENCY
    transient_retries: int = DEFAULT_TRANSIENT_RETRIES


def get_export_config() -> ExportConfig:
    return ExportConfig(
        batch_size=env_int("EXPORT_BATCH_SIZE", DEFAULT_BATCH_SIZE, minimum=1),
        poll_interval=env_float("EXPORT_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS, minimum=0),
        max_poll_attempts=env_int("EXPORT_MAX_POLL_ATTEMPTS", DEFAULT_MAX_POLL_ATTEMPTS, minimum=1),
        concurrency=env_int("EXPORT_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1),
        transient_retries=env_int("EXPORT_TRANSIENT_RETRIES", DEFAULT_TRANSIENT_RETRIES, minimum=0),
    )
