"""Explicit in-memory arena of mirrored entities."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .entity import SyncEntity
    from .enums import AssetType
    from .keys import EntityKey


class EntityArena:
    """Entities keyed by ``(asset_type, external_id, scope)`` with a parent -> children index.

    The arena owns no persistence concerns: repositories load entities into it and
    flush whatever the domain mutated.
    """

    def __init__(self, entities: Iterable[SyncEntity] = ()) -> None:
        self._entities: dict[EntityKey, SyncEntity] = {}
        self._children: defaultdict[EntityKey, list[EntityKey]] = defaultdict(list)
        for entity in entities:
            self.add(entity)

    def add(self, entity: SyncEntity) -> None:
        key = entity.key
        if key in self._entities:
            raise ValueError(f"Entity {key} already present in arena")
        self._entities[key] = entity
        if entity.parent is not None:
            self._children[entity.parent].append(key)

    def get(self, key: EntityKey) -> SyncEntity | None:
        return self._entities.get(key)

    def __getitem__(self, key: EntityKey) -> SyncEntity:
        return self._entities[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __iter__(self) -> Iterator[SyncEntity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def set_parent(self, entity: SyncEntity, parent: EntityKey | None) -> None:
        """Move ``entity`` under ``parent`` keeping the child index consistent."""

        key = entity.key
        if entity.parent == parent:
            return
        if entity.parent is not None:
            siblings = self._children.get(entity.parent)
            if siblings is not None and key in siblings:
                siblings.remove(key)
        entity.parent = parent
        if parent is not None:
            self._children[parent].append(key)

    def children_of(self, key: EntityKey) -> list[SyncEntity]:
        return [self._entities[child] for child in self._children.get(key, ())]

    def of_type(self, asset_type: AssetType, *, scope: str | None = None) -> list[SyncEntity]:
        return [
            entity
            for entity in self._entities.values()
            if entity.asset_type == asset_type and (scope is None or entity.scope == scope)
        ]
