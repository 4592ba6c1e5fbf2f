"""Public interface for the snapshot source adapter."""

from __future__ import annotations

from .listing import SnapshotListing
from .schema import EntityPayload, ListingPayload, SnapshotPayload

__all__ = ["EntityPayload", "ListingPayload", "SnapshotListing", "SnapshotPayload"]
