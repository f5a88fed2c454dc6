"""
Narrative Contracts

Typed narrative nodes, entity rows and presence values.

TAGGED UNION:
=============
A NarrativeNode carries exactly one payload type per kind.
Consumers match on `kind` (or the payload type) - payload fields are
never probed at runtime.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .base import Error, ErrorCode, TreeValidationError


# =============================================================================
# KINDS
# =============================================================================

class NodeKind(Enum):
    """Units of story structure."""
    OUTLINE = "outline"
    ACT = "act"
    CHAPTER = "chapter"
    SCENE = "scene"


class EntityKind(Enum):
    """Row families tracked against the outline."""
    CHARACTER = "character"
    LOCATION = "location"
    OBJECT = "object"
    LORE = "lore"


# =============================================================================
# PAYLOADS (one per node kind)
# =============================================================================

@dataclass(frozen=True)
class OutlinePayload:
    title: str = ""
    description: str = ""
    goal: str = ""
    timeline_event_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ActPayload:
    title: str = ""
    description: str = ""
    goal: str = ""
    timeline_event_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ChapterPayload:
    title: str = ""
    description: str = ""
    goal: str = ""
    timeline_event_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScenePayload:
    """
    Scene content consumed by presence strategies.

    The engine itself never reads these fields.
    """
    title: str = ""
    description: str = ""
    goal: str = ""
    pov_character_id: Optional[str] = None
    character_ids: Tuple[str, ...] = field(default_factory=tuple)
    location_ids: Tuple[str, ...] = field(default_factory=tuple)
    object_ids: Tuple[str, ...] = field(default_factory=tuple)
    lore_ids: Tuple[str, ...] = field(default_factory=tuple)
    timeline_event_ids: Tuple[str, ...] = field(default_factory=tuple)

    def members(self, kind: EntityKind) -> Tuple[str, ...]:
        """Entity ids of the given kind listed on this scene."""
        if kind is EntityKind.CHARACTER:
            return self.character_ids
        if kind is EntityKind.LOCATION:
            return self.location_ids
        if kind is EntityKind.OBJECT:
            return self.object_ids
        return self.lore_ids


NodePayload = Union[OutlinePayload, ActPayload, ChapterPayload, ScenePayload]

PAYLOAD_TYPES = {
    NodeKind.OUTLINE: OutlinePayload,
    NodeKind.ACT: ActPayload,
    NodeKind.CHAPTER: ChapterPayload,
    NodeKind.SCENE: ScenePayload,
}


# =============================================================================
# NODES
# =============================================================================

@dataclass(frozen=True)
class NarrativeNode:
    """
    A unit of story structure.

    `child_ids` defines display order. `parent_id` is a back-reference
    only; ownership flows from the parent's `child_ids`.
    """
    node_id: str
    kind: NodeKind
    child_ids: Tuple[str, ...] = field(default_factory=tuple)
    parent_id: Optional[str] = None
    payload: NodePayload = None

    def __post_init__(self):
        if not self.node_id or not isinstance(self.node_id, str):
            raise TreeValidationError(Error(
                code=ErrorCode.MALFORMED_RECORD,
                message="node_id must be a non-empty string",
            ))
        expected = PAYLOAD_TYPES[self.kind]
        if self.payload is None:
            object.__setattr__(self, 'payload', expected())
        elif not isinstance(self.payload, expected):
            raise TreeValidationError(Error(
                code=ErrorCode.PAYLOAD_KIND_MISMATCH,
                message=(
                    f"{self.kind.value} node requires {expected.__name__}, "
                    f"got {type(self.payload).__name__}"
                ),
                context=(("node_id", self.node_id),),
            ))
        object.__setattr__(self, 'child_ids', tuple(self.child_ids))

    @property
    def display_title(self) -> str:
        return self.payload.title

    @property
    def is_scene(self) -> bool:
        return self.kind is NodeKind.SCENE


# =============================================================================
# ENTITIES AND PRESENCE
# =============================================================================

@dataclass(frozen=True)
class Entity:
    """Row definition, independent of the tree."""
    entity_id: str
    display_name: str
    color_token: str
    tier: str
    kind: EntityKind = EntityKind.CHARACTER
    attributes: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PresenceResult:
    """
    Value returned by an injected presence strategy.

    NOT VALIDATED:
    ==============
    The matrix passes these values through untouched. Keeping
    `percentage` inside [0, 100] is the strategy's obligation.
    """
    percentage: float
    tier: str
    description: str = ""


@dataclass(frozen=True)
class PresenceCell:
    """One (entity, final node) intersection. Never persisted."""
    entity_id: str
    final_node_id: str
    percentage: float
    tier: str
