"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogClient, JobState, JobStatus
from .persistence import Repository, SyncEntityRepository
from .source import SourceListing, SourceRecord, SourceRef
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "CatalogClient",
    "JobState",
    "JobStatus",
    "Repository",
    "RepositoryCollection",
    "SourceListing",
    "SourceRecord",
    "SourceRef",
    "SyncEntityRepository",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
]
