"""Translate between export records and catalog payloads."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.export import ImportCounts
from catalogsync.domain.ports.catalog import JobState, JobStatus

from .schema import (
    AssetIdentifier,
    AssetTypeRef,
    AttributeValue,
    CommunityRef,
    DomainRef,
    ImportAsset,
    JobStatusResponse,
    RelationTarget,
)

if TYPE_CHECKING:
    from catalogsync.config import CatalogConfig
    from catalogsync.domain.export import ExportRecord
    from catalogsync.domain.model import AssetType

log = getLogger(__name__)

RELATION_DIRECTION = "SOURCE"

_JOB_STATES: dict[str, JobState] = {
    "QUEUED": JobState.QUEUED,
    "WAITING": JobState.QUEUED,
    "RUNNING": JobState.RUNNING,
    "COMPLETED": JobState.SUCCESS,
    "FAILED": JobState.FAILURE,
    "ERROR": JobState.FAILURE,
    "CANCELED": JobState.FAILURE,
}


def domain_ref(config: CatalogConfig, asset_type: AssetType) -> DomainRef:
    return DomainRef(
        name=config.domain_for(asset_type),
        community=CommunityRef(name=config.community),
    )


def to_import_asset(record: ExportRecord, config: CatalogConfig) -> ImportAsset:
    attributes = {
        name: [AttributeValue(value=value)]
        for name, value in record.attributes.items()
        if value and value.strip()
    }

    relations: dict[str, list[RelationTarget]] = {}
    for relation in record.relations:
        key = f"{config.relation_type_for(relation.name)}:{RELATION_DIRECTION}"
        relations.setdefault(key, []).append(
            RelationTarget(
                name=relation.target.identifier,
                domain=domain_ref(config, relation.target.asset_type),
            )
        )

    return ImportAsset(
        type=AssetTypeRef(name=record.catalog_type_name),
        display_name=record.display_name,
        identifier=AssetIdentifier(
            name=record.key.identifier,
            domain=domain_ref(config, record.asset_type),
        ),
        attributes=attributes or None,
        relations=relations or None,
    )


def to_job_status(response: JobStatusResponse) -> JobStatus:
    state = _JOB_STATES.get(response.state)
    if state is None:
        log.warning(f"Unknown job state {response.state!r} for job {response.id}; still polling")
        state = JobState.RUNNING

    result: ImportCounts | None = None
    if state is JobState.SUCCESS and response.result is not None:
        result = ImportCounts(
            created=response.result.created,
            updated=response.result.updated,
            relations_created=response.result.relations_created,
            skipped=response.result.skipped,
        )

    diagnostics = response.message
    if state is JobState.FAILURE and diagnostics is None:
        diagnostics = f"job ended in state {response.state}"
    return JobStatus(state=state, result=result, diagnostics=diagnostics)
