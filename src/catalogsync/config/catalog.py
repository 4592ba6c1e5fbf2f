"""Downstream catalog configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from catalogsync.domain.model import DEFAULT_DESCRIPTORS, AssetType

from .env import env_float, optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

DEFAULT_COMMUNITY = "Tableau Technology"
DEFAULT_IMPORT_PATH = "/rest/2.0/import/json-job"
DEFAULT_JOBS_PATH = "/rest/2.0/jobs"
DEFAULT_ASSETS_PATH = "/rest/2.0/assets"
CATALOG_TIMEOUT_SECONDS = 60.0

DEFAULT_DOMAINS: Mapping[AssetType, str] = MappingProxyType(
    {
        AssetType.SERVER: "Tableau Server",
        AssetType.SITE: "Tableau Site",
        AssetType.PROJECT: "Tableau Project",
        AssetType.WORKBOOK: "Tableau Workbook",
        AssetType.WORKSHEET: "Tableau Worksheet",
        AssetType.DATA_SOURCE: "Tableau Data Sources",
        AssetType.REPORT_ATTRIBUTE: "Tableau Report Attribute",
    }
)

# relation name -> catalog relation type id; override with CATALOG_RELATION_<NAME>,
# unmapped names are sent as-is
DEFAULT_RELATION_TYPE_IDS: Mapping[str, str] = MappingProxyType(
    {
        "hosted on": "0195fcd7-70c3-7cda-aaec-0c5ae3dc3af7",
        "parent project": "00000000-0000-0000-0000-120000000001",
        "belongs to site": "0195fc55-b49f-7711-9ce6-d87a1f60b36a",
        "contained in project": "0195fcea-cc73-7284-88a6-ea770982b1ba",
        "part of workbook": "0195fd0b-f14f-7e72-a382-750d4f3a704e",
        "shown in worksheet": "0195fd1e-47f7-7674-96eb-e91ff0ce71c4",
    }
)


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """Connection and placement settings for the governance catalog."""

    base_url: str
    username: str
    password: str
    resilience: ResilienceConfig
    community: str = DEFAULT_COMMUNITY
    domains: Mapping[AssetType, str] = field(default_factory=lambda: dict(DEFAULT_DOMAINS))
    relation_type_ids: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_RELATION_TYPE_IDS)
    )
    import_path: str = DEFAULT_IMPORT_PATH
    jobs_path: str = DEFAULT_JOBS_PATH
    assets_path: str = DEFAULT_ASSETS_PATH

    def domain_for(self, asset_type: AssetType) -> str:
        return self.domains.get(asset_type, DEFAULT_DOMAINS[asset_type])

    def relation_type_for(self, relation_name: str) -> str:
        return self.relation_type_ids.get(relation_name, relation_name)


def get_catalog_config(*, resilience: ResilienceConfig | None = None) -> CatalogConfig:
    values = require_env_vars(("CATALOG_BASE_URL", "CATALOG_USERNAME", "CATALOG_PASSWORD"))
    base_url = values["CATALOG_BASE_URL"].rstrip("/")

    domains = dict(DEFAULT_DOMAINS)
    for asset_type in AssetType:
        override = optional_env_var(f"CATALOG_DOMAIN_{asset_type.upper()}")
        if override is not None:
            domains[asset_type] = override

    relation_type_ids = dict(DEFAULT_RELATION_TYPE_IDS)
    for relation_name in _relation_names():
        env_name = _relation_env_var(relation_name)
        override = optional_env_var(env_name)
        if override is not None:
            relation_type_ids[relation_name] = override
        elif relation_name not in relation_type_ids:
            log.warning(f"No catalog relation type id for {relation_name!r}, set {env_name}")

    return CatalogConfig(
        base_url=base_url,
        username=values["CATALOG_USERNAME"],
        password=values["CATALOG_PASSWORD"],
        community=optional_env_var("CATALOG_COMMUNITY") or DEFAULT_COMMUNITY,
        domains=domains,
        relation_type_ids=relation_type_ids,
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=base_url,
            timeout_seconds=env_float(
                "CATALOG_TIMEOUT_SECONDS", CATALOG_TIMEOUT_SECONDS, minimum=0.1
            ),
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={"Accept": "application/json"},
        ),
    )


def _relation_env_var(relation_name: str) -> str:
    """``"used by workbook"`` -> ``CATALOG_RELATION_USED_BY_WORKBOOK``."""
    return "CATALOG_RELATION_" + "_".join(relation_name.upper().split())


def _relation_names() -> list[str]:
    names = {relation.name for descriptor in DEFAULT_DESCRIPTORS for relation in descriptor.relations}
    return sorted(names | set(DEFAULT_RELATION_TYPE_IDS))
