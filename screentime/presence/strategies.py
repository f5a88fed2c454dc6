"""
Deterministic Presence Strategies
=================================

Caller-side strategies shipped with the engine. The matrix never depends
on these; hosts may inject any PresenceStrategy.

SCENES:
=======
- Primary member (POV character, or first listed id for other kinds)
- Other listed members
- Entity name mentioned in the scene description
- Otherwise absent

COMPOSITES (outline / act / chapter):
=====================================
Floor of the mean of the non-zero presences of the resolvable children,
recursively, regardless of expansion. No non-zero child -> absent.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List
import math

from ..contracts.narrative import (
    EntityKind, NarrativeNode, PresenceResult, ScenePayload,
)
from ..entities import EntityRegistry
from ..tree import TreeModel
from .matrix import PresenceFunction, PresenceStrategy


ABSENT = PresenceResult(percentage=0, tier="Absent", description="Not present")


@dataclass(frozen=True)
class PresenceWeights:
    """Fixed percentages per scene role."""
    primary: float = 85
    supporting: float = 55
    mentioned: float = 7
    primary_arc_threshold: float = 70
    supporting_arc_threshold: float = 40


def classify_arc_tier(percentage: float, weights: PresenceWeights = PresenceWeights()) -> str:
    """Tier label for an aggregated (composite node) percentage."""
    if percentage >= weights.primary_arc_threshold:
        return "Primary Arc"
    if percentage >= weights.supporting_arc_threshold:
        return "Supporting Arc"
    return "Minor Presence"


class MembershipPresenceStrategy(PresenceStrategy):
    """Presence from scene membership lists, aggregated upward."""

    def __init__(
        self,
        tree: TreeModel,
        registry: EntityRegistry,
        kind: EntityKind = EntityKind.CHARACTER,
        weights: PresenceWeights = PresenceWeights()
    ):
        self._tree = tree
        self._registry = registry
        self._kind = kind
        self._weights = weights

    def presence(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        if isinstance(node.payload, ScenePayload):
            return self._scene_presence(entity_id, node.payload)
        return self._composite_presence(entity_id, node)

    def _primary_member(self, scene: ScenePayload):
        if self._kind is EntityKind.CHARACTER:
            return scene.pov_character_id
        members = scene.members(self._kind)
        return members[0] if members else None

    def _scene_presence(self, entity_id: str, scene: ScenePayload) -> PresenceResult:
        is_character = self._kind is EntityKind.CHARACTER

        if self._primary_member(scene) == entity_id:
            return PresenceResult(
                percentage=self._weights.primary,
                tier="Primary POV" if is_character else "Primary",
                description="Point of view character" if is_character else "Primary setting of the scene",
            )

        if entity_id in scene.members(self._kind):
            return PresenceResult(
                percentage=self._weights.supporting,
                tier="Major Supporting" if is_character else "Supporting",
                description="Active in scene",
            )

        entity = self._registry.get(entity_id)
        if entity and entity.display_name and \
                entity.display_name.lower() in scene.description.lower():
            return PresenceResult(
                percentage=self._weights.mentioned,
                tier="Mentioned Only",
                description="Referenced in dialogue or narration",
            )

        return ABSENT

    def _composite_presence(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        values: List[float] = []
        for child in self._tree.resolve_children(node.node_id):
            result = self.presence(entity_id, child)
            if result.percentage > 0:
                values.append(result.percentage)

        if not values:
            return ABSENT

        average = math.floor(sum(values) / len(values))
        return PresenceResult(
            percentage=average,
            tier=classify_arc_tier(average, self._weights),
            description=f"Average presence across {len(values)} child units",
        )


class ClampedPresenceStrategy(PresenceStrategy):
    """
    Clamp another strategy's percentages into [0, 100].

    The matrix never clamps; hosts that do not trust their strategy wrap
    it with this before injecting.
    """

    def __init__(self, inner: PresenceFunction):
        self._inner = inner

    def presence(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        result = self._inner(entity_id, node)
        percentage = result.percentage
        if percentage is None or (isinstance(percentage, float) and math.isnan(percentage)):
            percentage = 0
        clamped = max(0, min(100, percentage))
        if clamped == result.percentage:
            return result
        return PresenceResult(
            percentage=clamped,
            tier=result.tier,
            description=result.description,
        )
