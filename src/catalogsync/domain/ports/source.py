"""Ports for reading full listings from the source catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.domain.model import AssetType


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Reference to another source entity; ``scope=None`` means the listing's own scope."""

    external_id: str
    scope: str | None = None


@dataclass(frozen=True, slots=True)
class SourceRecord:
    """One entity as exposed by a full source listing."""

    external_id: str
    name: str
    attributes: Mapping[str, str | None] = field(default_factory=dict[str, "str | None"])
    parent: SourceRef | None = None
    relations: Mapping[str, Sequence[SourceRef]] = field(
        default_factory=dict[str, "Sequence[SourceRef]"]
    )


@runtime_checkable
class SourceListing(Protocol):
    """Full (never incremental) listing of one asset type within one scope.

    Absence from the returned sequence is the deletion signal.
    """

    def list_entities(self, asset_type: AssetType, scope: str) -> Sequence[SourceRecord]: ...

    def scopes(self, asset_type: AssetType) -> Sequence[str]: ...


__all__ = ["SourceListing", "SourceRecord", "SourceRef"]
