"""Pydantic models describing the catalog import and job payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CommunityRef(CatalogBaseModel):
    name: str


class DomainRef(CatalogBaseModel):
    name: str
    community: CommunityRef


class AssetIdentifier(CatalogBaseModel):
    name: str
    domain: DomainRef


class AssetTypeRef(CatalogBaseModel):
    name: str


class AttributeValue(CatalogBaseModel):
    value: str


class RelationTarget(CatalogBaseModel):
    name: str
    domain: DomainRef


class ImportAsset(CatalogBaseModel):
    """One entry of the JSON array uploaded to the import job endpoint."""

    resource_type: Literal["Asset"] = Field(default="Asset", alias="resourceType")
    type: AssetTypeRef
    display_name: str = Field(alias="displayName")
    identifier: AssetIdentifier
    attributes: dict[str, list[AttributeValue]] | None = None
    relations: dict[str, list[RelationTarget]] | None = None


class JobSubmitResponse(CatalogBaseModel):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value


class JobResultPayload(CatalogBaseModel):
    created: int = Field(default=0, alias="assetsCreated")
    updated: int = Field(default=0, alias="assetsUpdated")
    relations_created: int = Field(default=0, alias="relationsCreated")
    skipped: int = Field(default=0, alias="assetsSkipped")


class JobStatusResponse(CatalogBaseModel):
    id: str | None = None
    state: str
    result: JobResultPayload | None = None
    message: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class AssetSummary(CatalogBaseModel):
    id: str
    name: str | None = None


class AssetSearchResponse(CatalogBaseModel):
    total: int | None = None
    results: list[AssetSummary] = Field(default_factory=list["AssetSummary"])
