"""Identity value objects for mirrored entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import AssetType

IDENTIFIER_SEPARATOR = ">"


@dataclass(frozen=True, slots=True, order=True)
class EntityKey:
    """Identity of a mirrored entity: unique only within ``(asset_type, scope)``."""

    asset_type: AssetType
    external_id: str
    scope: str

    @property
    def identifier(self) -> str:
        """Stable identifier used by the downstream catalog."""
        return f"{self.scope}{IDENTIFIER_SEPARATOR}{self.external_id}"

    def __str__(self) -> str:
        return f"{self.asset_type}:{self.identifier}"


@dataclass(frozen=True, slots=True)
class RelationRef:
    """Named reference from one entity to another, used only at export time."""

    name: str
    target: EntityKey
