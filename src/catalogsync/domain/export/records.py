"""Export-time representation of mirrored entities."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from catalogsync.domain.model import (
        AssetType,
        AssetTypeDescriptor,
        EntityKey,
        RelationRef,
        SyncEntity,
    )


@dataclass(frozen=True, slots=True)
class ExportRecord:
    """What the downstream catalog receives for one entity."""

    key: EntityKey
    catalog_type_name: str
    display_name: str
    attributes: Mapping[str, str] = field(default_factory=dict[str, str])
    relations: tuple[RelationRef, ...] = ()

    @property
    def asset_type(self) -> AssetType:
        return self.key.asset_type

    @property
    def parent_key(self) -> EntityKey | None:
        """First relation target of the same type, used for best-effort ordering."""

        for relation in self.relations:
            if relation.target.asset_type == self.key.asset_type:
                return relation.target
        return None

    def without_relations(self) -> ExportRecord:
        return replace(self, relations=())


def build_record(entity: SyncEntity, descriptor: AssetTypeDescriptor) -> ExportRecord:
    return ExportRecord(
        key=entity.key,
        catalog_type_name=descriptor.catalog_type_name,
        display_name=entity.name,
        attributes=dict(entity.attributes),
        relations=entity.relations,
    )
