"""HTTP client for the governance catalog's job-based import API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter, ValidationError

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.domain.errors import CatalogSyncError, TransientTransportError

from .schema import AssetSearchResponse, ImportAsset, JobStatusResponse, JobSubmitResponse
from .translator import to_import_asset, to_job_status

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from pydantic import BaseModel

    from catalogsync.config import CatalogConfig
    from catalogsync.domain.export import ExportRecord
    from catalogsync.domain.ports.catalog import JobStatus

log = getLogger(__name__)

IMPORT_FILENAME = "import.json"
IMPORT_OPTIONS: dict[str, str] = {
    "existingAssetPolicy": "UPDATE",
    "existingRelationPolicy": "UPDATE",
    "continueOnError": "true",
    "sendNotification": "false",
}

_IMPORT_PAYLOAD = TypeAdapter(list[ImportAsset])


class CatalogAPIError(CatalogSyncError):
    """Raised when the catalog rejects a request or returns an unreadable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _default_client_factory(config: CatalogConfig) -> ResilientClient:
    return ResilientClient(config.resilience, auth=httpx.BasicAuth(config.username, config.password))


@dataclass(slots=True)
class HttpCatalogClient:
    config: CatalogConfig
    client_factory: Callable[[CatalogConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> HttpCatalogClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def submit_batch(self, records: Sequence[ExportRecord]) -> str:
        assets = [to_import_asset(record, self.config) for record in records]
        payload = _IMPORT_PAYLOAD.dump_json(assets, by_alias=True, exclude_none=True)
        log.debug(f"Import payload for {len(assets)} assets: {payload[:2000]!r}")

        response = await self._call(
            "POST",
            self.config.import_path,
            files={"file": (IMPORT_FILENAME, payload, "application/json")},
            data=IMPORT_OPTIONS,
        )
        submitted = self._parse(JobSubmitResponse, response)
        log.info(f"Submitted import job {submitted.id} ({len(assets)} assets)")
        return submitted.id

    async def job_status(self, job_id: str) -> JobStatus:
        response = await self._call("GET", f"{self.config.jobs_path}/{job_id}")
        return to_job_status(self._parse(JobStatusResponse, response))

    async def delete_asset(self, record: ExportRecord) -> bool:
        """Remove the asset identified by ``record``; False when it does not exist downstream."""

        domain_name = self.config.domain_for(record.asset_type)
        response = await self._call(
            "GET",
            self.config.assets_path,
            params={
                "name": record.key.identifier,
                "domainName": domain_name,
                "nameMatchMode": "EXACT",
                "limit": 1,
            },
        )
        found = self._parse(AssetSearchResponse, response)
        if not found.results:
            log.debug(f"No asset named {record.key.identifier!r} in domain {domain_name!r}")
            return False

        asset_id = found.results[0].id
        try:
            await self._call("DELETE", f"{self.config.assets_path}/{asset_id}")
        except CatalogAPIError as exc:
            if exc.status_code == httpx.codes.NOT_FOUND:
                return False
            raise
        log.info(f"Deleted {record.key} (asset {asset_id})")
        return True

    def _client(self) -> ResilientClient:
        if self._http is None:
            self._http = self.client_factory(self.config)
        return self._http

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> httpx.Response:
        url = f"{self.config.base_url}{path}"
        try:
            response = await self._client().request(
                method, url, params=params, data=data, files=files
            )
        except httpx.TransportError as exc:
            raise TransientTransportError(f"{method} {path}: {exc}") from exc
        except httpx.HTTPError as exc:
            log.error(f"Catalog request {method} {path} failed: {exc}")
            raise CatalogAPIError(f"{method} {path}: {exc}") from exc

        if response.status_code >= httpx.codes.INTERNAL_SERVER_ERROR:
            raise TransientTransportError(f"{method} {path}: HTTP {response.status_code}")
        if response.is_error:
            log.error(f"Catalog rejected {method} {path}: {response.status_code} {response.text}")
            raise CatalogAPIError(
                f"{method} {path} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse[TModel: BaseModel](model: type[TModel], response: httpx.Response) -> TModel:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise CatalogAPIError(f"Unexpected catalog response: {exc}") from exc
