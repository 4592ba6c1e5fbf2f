"""Result types reported by the export engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model import AssetType, EntityKey


@dataclass(frozen=True, slots=True)
class ImportCounts:
    """Authoritative counts read from a terminal job payload."""

    created: int = 0
    updated: int = 0
    relations_created: int = 0
    skipped: int = 0

    def __add__(self, other: ImportCounts) -> ImportCounts:
        return ImportCounts(
            created=self.created + other.created,
            updated=self.updated + other.updated,
            relations_created=self.relations_created + other.relations_created,
            skipped=self.skipped + other.skipped,
        )


@dataclass(frozen=True, slots=True)
class JobOutcome:
    job_id: str
    counts: ImportCounts
    attempts: int


class ExportPhase(StrEnum):
    SINGLE = "single"
    IDENTITY = "identity"
    RELATIONS = "relations"


@dataclass(slots=True, kw_only=True)
class ChunkResult:
    phase: ExportPhase
    index: int
    size: int
    success: bool
    counts: ImportCounts = field(default_factory=ImportCounts)
    job_id: str | None = None
    attempts: int = 0
    error: str | None = None


@dataclass(slots=True, kw_only=True)
class TypeExportResult:
    """Per-type outcome with exact per-phase, per-chunk counts."""

    asset_type: AssetType
    chunks: list[ChunkResult] = field(default_factory=list["ChunkResult"])
    skipped: int = 0
    relations_skipped: bool = False
    message: str | None = None
    confirmed: list[EntityKey] = field(default_factory=list["EntityKey"])

    @property
    def success(self) -> bool:
        return not self.relations_skipped and all(chunk.success for chunk in self.chunks)

    def phase_counts(self, phase: ExportPhase) -> ImportCounts:
        total = ImportCounts()
        for chunk in self.chunks:
            if chunk.phase is phase:
                total += chunk.counts
        return total

    @property
    def counts(self) -> ImportCounts:
        """Created/updated come from the identity-establishing pass, relations from the last."""

        single = self.phase_counts(ExportPhase.SINGLE)
        identity = self.phase_counts(ExportPhase.IDENTITY)
        relations = self.phase_counts(ExportPhase.RELATIONS)
        return ImportCounts(
            created=single.created + identity.created,
            updated=single.updated + identity.updated,
            relations_created=single.relations_created + relations.relations_created,
            skipped=self.skipped + single.skipped + identity.skipped,
        )


@dataclass(slots=True, kw_only=True)
class DeletionResult:
    attempted: int = 0
    deleted: int = 0
    failures: list[str] = field(default_factory=list[str])
    retracted: list[EntityKey] = field(default_factory=list["EntityKey"])

    @property
    def success(self) -> bool:
        return not self.failures


@dataclass(slots=True, kw_only=True)
class ExportRunResult:
    """Aggregate outcome of a multi-type export run. Never raised, always returned."""

    types: list[TypeExportResult] = field(default_factory=list[TypeExportResult])
    deletions: DeletionResult = field(default_factory=DeletionResult)
    message: str | None = None

    @property
    def success(self) -> bool:
        return all(result.success for result in self.types) and self.deletions.success

    @property
    def created(self) -> int:
        return sum(result.counts.created for result in self.types)

    @property
    def updated(self) -> int:
        return sum(result.counts.updated for result in self.types)

    @property
    def relations_created(self) -> int:
        return sum(result.counts.relations_created for result in self.types)

    @property
    def skipped(self) -> int:
        return sum(result.counts.skipped for result in self.types)

    @property
    def deleted(self) -> int:
        return self.deletions.deleted

    def for_type(self, asset_type: AssetType) -> TypeExportResult | None:
        for result in self.types:
            if result.asset_type == asset_type:
                return result
        return None
