"""Public interface for the catalog adapter."""

from __future__ import annotations

from .client import CatalogAPIError, HttpCatalogClient
from .schema import ImportAsset, JobStatusResponse
from .translator import to_import_asset, to_job_status

__all__ = [
    "CatalogAPIError",
    "HttpCatalogClient",
    "ImportAsset",
    "JobStatusResponse",
    "to_import_asset",
    "to_job_status",
]
