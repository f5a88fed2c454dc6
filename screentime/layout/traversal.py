"""
Shared traversal rule for the header layout and the final columns.

A node opens when it is expanded AND at least one child id resolves.
The header layout and the final columns both go through open_children.
"""

from __future__ import annotations
from typing import Container, Optional, Sequence, Tuple

from ..contracts.narrative import NarrativeNode
from ..tree import TreeModel


def open_children(
    node: NarrativeNode,
    tree: TreeModel,
    expanded: Container[str]
) -> Tuple[NarrativeNode, ...]:
    """Resolvable children of an expanded node, else ()."""
    if node.node_id not in expanded:
        return ()
    return tree.resolve_children(node.node_id)


def resolve_roots(
    tree: TreeModel,
    roots: Optional[Sequence[NarrativeNode]]
) -> Sequence[NarrativeNode]:
    return tree.root_nodes if roots is None else roots
