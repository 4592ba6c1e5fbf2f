"""Pydantic models for source snapshot files."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from catalogsync.domain.model import AssetType


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RefPayload(SnapshotBaseModel):
    external_id: str = Field(alias="id")
    scope: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_id(cls, value: object) -> object:
        if isinstance(value, str | int):
            return {"id": str(value)}
        return value


class EntityPayload(SnapshotBaseModel):
    external_id: str = Field(alias="id")
    name: str
    attributes: dict[str, str | None] = Field(default_factory=dict[str, "str | None"])
    parent: RefPayload | None = None
    relations: dict[str, list[RefPayload]] = Field(default_factory=dict[str, "list[RefPayload]"])

    @field_validator("external_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("attributes", mode="before")
    @classmethod
    def _stringify_attributes(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        mapping = cast(Mapping[str, object], value)
        return {
            key: None if item is None else str(item) for key, item in mapping.items()
        }

    @field_validator("relations", mode="before")
    @classmethod
    def _wrap_single_targets(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        mapping = cast(Mapping[str, object], value)
        return {
            key: targets if isinstance(targets, list) else [targets]
            for key, targets in mapping.items()
        }


class ListingPayload(SnapshotBaseModel):
    asset_type: AssetType = Field(alias="assetType")
    scope: str
    entities: list[EntityPayload] = Field(default_factory=list["EntityPayload"])


class SnapshotPayload(SnapshotBaseModel):
    listings: list[ListingPayload] = Field(default_factory=list["ListingPayload"])
