"""Domain model for mirrored catalog entities."""

from __future__ import annotations

from .arena import EntityArena
from .descriptors import (
    DEFAULT_DESCRIPTORS,
    AssetTypeDescriptor,
    DescriptorRegistry,
    RelationDescriptor,
    default_registry,
)
from .entity import SyncEntity, new_id
from .enums import AssetType, PropagationStatus, StatusFlag
from .keys import EntityKey, RelationRef

__all__ = [
    "DEFAULT_DESCRIPTORS",
    "AssetType",
    "AssetTypeDescriptor",
    "DescriptorRegistry",
    "EntityArena",
    "EntityKey",
    "PropagationStatus",
    "RelationDescriptor",
    "RelationRef",
    "StatusFlag",
    "SyncEntity",
    "default_registry",
    "new_id",
]
