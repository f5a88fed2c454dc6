"""
Final Column Resolver

Ordered list of the deepest currently-visible nodes. Each one is a grid
column. Its length must equal the level-0 span sum of the header layout.
"""

from __future__ import annotations
from typing import Container, List, Optional, Sequence

from ..contracts.layout import FinalNodeList
from ..contracts.narrative import NarrativeNode
from ..tree import TreeModel
from .traversal import open_children, resolve_roots


class FinalColumnResolver:
    """Pure column resolver. Holds no state between calls."""

    def resolve(
        self,
        tree: TreeModel,
        expanded: Container[str],
        roots: Optional[Sequence[NarrativeNode]] = None
    ) -> FinalNodeList:
        collected: List[NarrativeNode] = []

        def collect(node: NarrativeNode):
            children = open_children(node, tree, expanded)
            if children:
                for child in children:
                    collect(child)
            else:
                collected.append(node)

        for root in resolve_roots(tree, roots):
            collect(root)

        return FinalNodeList(nodes=tuple(collected))
