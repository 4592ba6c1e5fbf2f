"""Batch planning, job polling and the relation-safe export protocol."""

from __future__ import annotations

from .deletions import DeferredDeletionCoordinator
from .planner import order_by_dependency, plan
from .poller import JobPoller
from .records import ExportRecord, build_record
from .results import (
    ChunkResult,
    DeletionResult,
    ExportPhase,
    ExportRunResult,
    ImportCounts,
    JobOutcome,
    TypeExportResult,
)
from .runner import ExportRunner, run_export
from .two_phase import TwoPhaseExporter

__all__ = [
    "ChunkResult",
    "DeferredDeletionCoordinator",
    "DeletionResult",
    "ExportPhase",
    "ExportRecord",
    "ExportRunResult",
    "ExportRunner",
    "ImportCounts",
    "JobOutcome",
    "JobPoller",
    "TwoPhaseExporter",
    "TypeExportResult",
    "build_record",
    "order_by_dependency",
    "plan",
    "run_export",
]
