"""
Column Layout Engine
====================

(tree, expansion) -> per-level header entries with span and position.

ALGORITHM:
==========
Depth-first, pre-order, single pass with a running column cursor.
- Expanded node with resolvable children: its children are placed at
  level + 1 starting at the parent's own position; the parent's span is
  the sum of the children's spans.
- Anything else: span 1.

Each level's slot is reserved before descending so entries stay in
display order while spans are filled in on the way back up. Work is
O(visible nodes) per call and every call recomputes from scratch.
"""

from __future__ import annotations
from typing import Container, List, Optional, Sequence, Tuple

from ..contracts.layout import LayeredColumnLayout, LayoutEntry
from ..contracts.narrative import NarrativeNode
from ..tree import TreeModel
from .traversal import open_children, resolve_roots


class ColumnLayoutEngine:
    """Pure header layout. Holds no state between calls."""

    def compute(
        self,
        tree: TreeModel,
        expanded: Container[str],
        roots: Optional[Sequence[NarrativeNode]] = None
    ) -> LayeredColumnLayout:
        levels: List[List[Optional[LayoutEntry]]] = []
        cursor = 0
        for root in resolve_roots(tree, roots):
            cursor += self._place(root, 0, cursor, (), tree, expanded, levels)
        return LayeredColumnLayout(
            levels=tuple(tuple(row) for row in levels)
        )

    def _place(
        self,
        node: NarrativeNode,
        level: int,
        position: int,
        parent_path: Tuple[str, ...],
        tree: TreeModel,
        expanded: Container[str],
        levels: List[List[Optional[LayoutEntry]]]
    ) -> int:
        """Place a node and its open subtree. Returns the node's span."""
        if len(levels) <= level:
            levels.append([])
        row = levels[level]
        slot = len(row)
        row.append(None)

        children = open_children(node, tree, expanded)
        if children:
            child_path = parent_path + (node.node_id,)
            cursor = position
            for child in children:
                cursor += self._place(
                    child, level + 1, cursor, child_path, tree, expanded, levels
                )
            span = cursor - position
        else:
            span = 1

        row[slot] = LayoutEntry(
            node_id=node.node_id,
            level=level,
            span=span,
            position=position,
            parent_path=parent_path,
        )
        return span

    def span_of(
        self,
        node: NarrativeNode,
        tree: TreeModel,
        expanded: Container[str]
    ) -> int:
        """Column span of a single subtree under the current expansion."""
        children = open_children(node, tree, expanded)
        if not children:
            return 1
        return sum(self.span_of(child, tree, expanded) for child in children)
