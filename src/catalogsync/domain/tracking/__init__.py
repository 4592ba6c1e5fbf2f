"""Change tracking: fingerprints, lifecycle classification and propagation state."""

from __future__ import annotations

from .cascade import cascade_delete, collect_subtree
from .fingerprint import fingerprint
from .lifecycle import classify, classify_absent
from .propagation import apply_status, mark_synced, needs_import, needs_retraction, project
from .reconcile import ReconcileResult, reconcile_listing, revive

__all__ = [
    "ReconcileResult",
    "apply_status",
    "cascade_delete",
    "classify",
    "classify_absent",
    "collect_subtree",
    "fingerprint",
    "mark_synced",
    "needs_import",
    "needs_retraction",
    "project",
    "reconcile_listing",
    "revive",
]
