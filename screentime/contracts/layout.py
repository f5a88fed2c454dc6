"""
Layout Contracts

Plain data emitted at the rendering boundary.

INVARIANTS:
===========
1. Entries at a level partition [0, total_columns) without gaps/overlaps
   (levels below 0 cover only the columns of expanded ancestors)
2. An expanded parent's span equals the sum of its children's spans
3. len(FinalNodeList) == sum(span of level-0 entries)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from .narrative import NarrativeNode


@dataclass(frozen=True)
class LayoutEntry:
    """A header cell: one node placed on a header level."""
    node_id: str
    level: int
    span: int
    position: int
    parent_path: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def end(self) -> int:
        """Exclusive column bound."""
        return self.position + self.span


@dataclass(frozen=True)
class LayeredColumnLayout:
    """
    Multi-level header layout.

    DERIVED VIEW:
    =============
    Recomputed wholesale on every expansion change, never patched.
    """
    levels: Tuple[Tuple[LayoutEntry, ...], ...] = field(default_factory=tuple)

    @property
    def depth(self) -> int:
        return len(self.levels)

    @property
    def total_columns(self) -> int:
        if not self.levels:
            return 0
        return sum(entry.span for entry in self.levels[0])

    def entries_at(self, level: int) -> Tuple[LayoutEntry, ...]:
        if 0 <= level < len(self.levels):
            return self.levels[level]
        return ()

    def find(self, node_id: str) -> Optional[LayoutEntry]:
        for level in self.levels:
            for entry in level:
                if entry.node_id == node_id:
                    return entry
        return None

    def __iter__(self) -> Iterator[Tuple[LayoutEntry, ...]]:
        return iter(self.levels)


@dataclass(frozen=True)
class FinalNodeList:
    """Deepest currently-visible nodes; one grid column each."""
    nodes: Tuple[NarrativeNode, ...] = field(default_factory=tuple)

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(node.node_id for node in self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[NarrativeNode]:
        return iter(self.nodes)

    def __getitem__(self, index: int) -> NarrativeNode:
        return self.nodes[index]
