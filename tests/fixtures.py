"""
Deterministic test fixtures.

Scenario tree used throughout:

    Act1
      Chapter1
        Scene1
        Scene2
      Chapter2
        Scene3
"""

from typing import Dict, List, Tuple

from screentime.contracts.narrative import (
    ActPayload, ChapterPayload, Entity, NarrativeNode, NodeKind,
    PresenceResult, ScenePayload,
)
from screentime.entities import EntityRegistry
from screentime.presence import PresenceStrategy
from screentime.tree import TreeModel


def act(node_id: str, children=(), title: str = "") -> NarrativeNode:
    return NarrativeNode(node_id, NodeKind.ACT, tuple(children), None, ActPayload(title=title))


def chapter(node_id: str, children=(), parent=None, title: str = "") -> NarrativeNode:
    return NarrativeNode(node_id, NodeKind.CHAPTER, tuple(children), parent, ChapterPayload(title=title))


def scene(node_id: str, parent=None, title: str = "", **payload) -> NarrativeNode:
    return NarrativeNode(
        node_id, NodeKind.SCENE, (), parent, ScenePayload(title=title, **payload)
    )


def scenario_nodes() -> List[NarrativeNode]:
    return [
        act("act1", ("ch1", "ch2"), title="Act 1"),
        chapter("ch1", ("sc1", "sc2"), parent="act1", title="Chapter 1"),
        chapter("ch2", ("sc3",), parent="act1", title="Chapter 2"),
        scene("sc1", parent="ch1", title="Scene 1"),
        scene("sc2", parent="ch1", title="Scene 2"),
        scene("sc3", parent="ch2", title="Scene 3"),
    ]


def scenario_tree() -> TreeModel:
    return TreeModel(scenario_nodes())


def two_act_tree() -> TreeModel:
    """Scenario tree plus a second act with two scenes."""
    nodes = scenario_nodes() + [
        act("act2", ("sc4", "sc5"), title="Act 2"),
        scene("sc4", parent="act2", title="Scene 4"),
        scene("sc5", parent="act2", title="Scene 5"),
    ]
    return TreeModel(nodes)


def nine_entities() -> Tuple[Entity, ...]:
    tiers = ("Primary", "Secondary", "Tertiary")
    return tuple(
        Entity(
            entity_id=f"e{i}",
            display_name=f"Entity {i}",
            color_token=f"color-{i}",
            tier=tiers[i % 3],
        )
        for i in range(9)
    )


def nine_entity_registry() -> EntityRegistry:
    return EntityRegistry(nine_entities())


class CountingStrategy(PresenceStrategy):
    """Deterministic stub that records every invocation."""

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []

    def presence(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        self.calls.append((entity_id, node.node_id))
        percentage = 50 if node.is_scene else 10
        return PresenceResult(percentage=percentage, tier="Stub")

    @property
    def call_count(self) -> int:
        return len(self.calls)


def fixed_strategy(values: Dict[Tuple[str, str], float]):
    """Plain-function strategy backed by a lookup table (0 when missing)."""

    def presence(entity_id: str, node: NarrativeNode) -> PresenceResult:
        return PresenceResult(percentage=values.get((entity_id, node.node_id), 0), tier="Fixed")

    return presence
