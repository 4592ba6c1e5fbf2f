"""Per-asset-type descriptors.

A descriptor tells the generic machinery which values of a source record are
tracked for change detection, where the type sits in the containment
hierarchy, and which named relations it may carry to other entities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import AssetType

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

    from .keys import EntityKey, RelationRef

RELATION_TARGET_SEPARATOR = ","


@dataclass(frozen=True, slots=True)
class RelationDescriptor:
    name: str
    target_type: AssetType


@dataclass(frozen=True, slots=True)
class AssetTypeDescriptor:
    asset_type: AssetType
    catalog_type_name: str
    tracked_attributes: tuple[str, ...] = ()
    parent_type: AssetType | None = None
    relations: tuple[RelationDescriptor, ...] = ()

    @property
    def can_self_relate(self) -> bool:
        """True when an entity of this type may reference another of the same type."""
        return any(relation.target_type == self.asset_type for relation in self.relations)

    @property
    def depends_on(self) -> frozenset[AssetType]:
        """Other asset types that relations of this type may point at."""
        return frozenset(
            relation.target_type
            for relation in self.relations
            if relation.target_type != self.asset_type
        )

    def relation(self, name: str) -> RelationDescriptor | None:
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None

    def tracked_values(
        self,
        *,
        name: str,
        attributes: Mapping[str, str | None],
        parent: EntityKey | None,
        relations: Sequence[RelationRef],
    ) -> tuple[str | None, ...]:
        """Project a source record onto the ordered tuple that feeds the fingerprint.

        Attributes not listed in ``tracked_attributes`` never contribute.
        """

        values: list[str | None] = [name]
        values.extend(attributes.get(attribute) for attribute in self.tracked_attributes)
        values.append(parent.identifier if parent is not None else None)
        for descriptor in self.relations:
            targets = sorted(
                relation.target.identifier
                for relation in relations
                if relation.name == descriptor.name
            )
            values.append(RELATION_TARGET_SEPARATOR.join(targets) or None)
        return tuple(values)


class DescriptorRegistry:
    """Ordered collection of descriptors.

    A descriptor may only depend on (or be contained by) types registered
    before it, which gives the export runner a fixed, acyclic type order.
    """

    def __init__(self, descriptors: Iterable[AssetTypeDescriptor]) -> None:
        self._descriptors: dict[AssetType, AssetTypeDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.asset_type in self._descriptors:
                raise ValueError(f"Duplicate descriptor for {descriptor.asset_type}")
            earlier = set(self._descriptors)
            required = set(descriptor.depends_on)
            if descriptor.parent_type is not None and descriptor.parent_type != (
                descriptor.asset_type
            ):
                required.add(descriptor.parent_type)
            missing = required - earlier
            if missing:
                names = ", ".join(sorted(missing))
                raise ValueError(
                    f"Descriptor for {descriptor.asset_type} references types "
                    f"registered after it: {names}"
                )
            self._descriptors[descriptor.asset_type] = descriptor

    def __getitem__(self, asset_type: AssetType) -> AssetTypeDescriptor:
        try:
            return self._descriptors[asset_type]
        except KeyError:
            raise KeyError(f"No descriptor registered for {asset_type}") from None

    def __contains__(self, asset_type: object) -> bool:
        return asset_type in self._descriptors

    def __iter__(self) -> Iterator[AssetTypeDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def asset_types(self) -> tuple[AssetType, ...]:
        return tuple(self._descriptors)


DEFAULT_DESCRIPTORS: tuple[AssetTypeDescriptor, ...] = (
    AssetTypeDescriptor(
        asset_type=AssetType.SERVER,
        catalog_type_name="Tableau Server",
        tracked_attributes=("URL", "Version", "Build"),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.SITE,
        catalog_type_name="Tableau Site",
        tracked_attributes=("URL", "Content URL"),
        parent_type=AssetType.SERVER,
        relations=(RelationDescriptor("hosted on", AssetType.SERVER),),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.PROJECT,
        catalog_type_name="Tableau Project",
        tracked_attributes=("Description", "Owner in Source"),
        parent_type=AssetType.SITE,
        relations=(
            RelationDescriptor("belongs to site", AssetType.SITE),
            RelationDescriptor("parent project", AssetType.PROJECT),
        ),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.WORKBOOK,
        catalog_type_name="Tableau Workbook",
        tracked_attributes=("Description", "Owner in Source", "Document modification date"),
        parent_type=AssetType.PROJECT,
        relations=(RelationDescriptor("contained in project", AssetType.PROJECT),),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.WORKSHEET,
        catalog_type_name="Tableau Worksheet",
        parent_type=AssetType.WORKBOOK,
        relations=(RelationDescriptor("part of workbook", AssetType.WORKBOOK),),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.DATA_SOURCE,
        catalog_type_name="Tableau Data Source",
        tracked_attributes=(
            "Description",
            "Owner",
            "Connection Type",
            "Table Name",
            "Schema Name",
            "Database Name",
            "Server Name",
            "Is Certified",
            "Is Published",
            "Source Type",
        ),
        parent_type=AssetType.WORKBOOK,
        relations=(RelationDescriptor("used by workbook", AssetType.WORKBOOK),),
    ),
    AssetTypeDescriptor(
        asset_type=AssetType.REPORT_ATTRIBUTE,
        catalog_type_name="Tableau Report Attribute",
        tracked_attributes=("Technical Data Type", "Role in Report", "Calculation Rule"),
        parent_type=AssetType.WORKSHEET,
        relations=(
            RelationDescriptor("shown in worksheet", AssetType.WORKSHEET),
            RelationDescriptor("reads from data source", AssetType.DATA_SOURCE),
            RelationDescriptor("derived from", AssetType.REPORT_ATTRIBUTE),
        ),
    ),
)


def default_registry() -> DescriptorRegistry:
    return DescriptorRegistry(DEFAULT_DESCRIPTORS)
