"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class StatusFlag(StrEnum):
    """Lifecycle classification of a mirrored entity relative to the source."""

    NEW = "new"
    ACTIVE = "active"
    UPDATED = "updated"
    DELETED = "deleted"


class PropagationStatus(StrEnum):
    """Whether the latest classification has been pushed to the downstream catalog."""

    NOT_SYNCED = "not_synced"
    SYNCED = "synced"
    PENDING_UPDATE = "pending_update"
    PENDING_DELETE = "pending_delete"


class AssetType(StrEnum):
    SERVER = "server"
    SITE = "site"
    PROJECT = "project"
    WORKBOOK = "workbook"
    WORKSHEET = "worksheet"
    DATA_SOURCE = "data_source"
    REPORT_ATTRIBUTE = "report_attribute"
