"""
Entity Registry and Row Filtering
=================================

Row definitions supplied by the host, injected per visualization
instance (no process-wide store).

FILTER RULES:
=============
- selected_ids: None shows every entity; a set restricts to it
- query: case-insensitive substring over display name and attributes
- hidden_tiers: collapsed tier groups contribute no rows
- Registry order is preserved
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from .contracts.narrative import Entity, EntityKind


TIER_ORDER: Tuple[str, ...] = ("Primary", "Secondary", "Tertiary")


class EntityRegistry:
    """Ordered, read-only set of entity rows."""

    def __init__(self, entities: Iterable[Entity] = ()):
        self._entities: Dict[str, Entity] = {}
        for entity in entities:
            self._entities[entity.entity_id] = entity

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "EntityRegistry":
        """
        Build from exported entity records:
        {"id", "name", "color", "tier", "kind", "attributes"}.
        Records of an unknown kind are skipped.
        """
        kinds = {kind.value: kind for kind in EntityKind}
        entities = []
        for record in records:
            kind = kinds.get(record.get("kind", EntityKind.CHARACTER.value))
            if kind is None or not record.get("id"):
                continue
            entities.append(Entity(
                entity_id=str(record["id"]),
                display_name=str(record.get("name") or record["id"]),
                color_token=str(record.get("color") or ""),
                tier=str(record.get("tier") or ""),
                kind=kind,
                attributes=tuple(str(a) for a in record.get("attributes") or ()),
            ))
        return cls(entities)

    def get(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def all(self) -> Tuple[Entity, ...]:
        return tuple(self._entities.values())

    def of_kind(self, kind: EntityKind) -> "EntityRegistry":
        return EntityRegistry(e for e in self._entities.values() if e.kind is kind)

    def groups(self) -> Dict[str, Tuple[Entity, ...]]:
        """Entities grouped by tier: known tiers first, then the rest by name."""
        grouped: Dict[str, List[Entity]] = {}
        for entity in self._entities.values():
            grouped.setdefault(entity.tier or "Other", []).append(entity)

        ordered = [t for t in TIER_ORDER if t in grouped]
        ordered += sorted(t for t in grouped if t not in TIER_ORDER)
        return {tier: tuple(grouped[tier]) for tier in ordered}

    def search(self, query: str) -> Tuple[Entity, ...]:
        needle = query.strip().lower()
        if not needle:
            return self.all()
        return tuple(e for e in self._entities.values() if _matches(e, needle))


def _matches(entity: Entity, needle: str) -> bool:
    if needle in entity.display_name.lower():
        return True
    return any(needle in attribute.lower() for attribute in entity.attributes)


@dataclass(frozen=True)
class EntityFilter:
    """Immutable row filter; every change produces a new filter."""
    selected_ids: Optional[FrozenSet[str]] = None
    query: str = ""
    hidden_tiers: FrozenSet[str] = field(default_factory=frozenset)

    def visible(self, registry: EntityRegistry) -> Tuple[Entity, ...]:
        needle = self.query.strip().lower()
        rows = []
        for entity in registry:
            if self.selected_ids is not None and entity.entity_id not in self.selected_ids:
                continue
            if (entity.tier or "Other") in self.hidden_tiers:
                continue
            if needle and not _matches(entity, needle):
                continue
            rows.append(entity)
        return tuple(rows)

    def toggle_entity(self, entity_id: str, registry: EntityRegistry) -> "EntityFilter":
        """Flip one row in or out of the selection. Unknown ids are ignored."""
        if entity_id not in registry:
            return self
        current = self.selected_ids
        if current is None:
            current = frozenset(e.entity_id for e in registry)
        if entity_id in current:
            selected = current - {entity_id}
        else:
            selected = current | {entity_id}
        return replace(self, selected_ids=frozenset(selected))

    def toggle_tier(self, tier: str) -> "EntityFilter":
        if tier in self.hidden_tiers:
            return replace(self, hidden_tiers=self.hidden_tiers - {tier})
        return replace(self, hidden_tiers=self.hidden_tiers | {tier})

    def with_query(self, query: str) -> "EntityFilter":
        return replace(self, query=query)

    def select_all(self) -> "EntityFilter":
        return replace(self, selected_ids=None)
