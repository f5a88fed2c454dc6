"""
Narrative Tree Model
====================

Read-only narrative tree plus node lookup.

CONSTRUCTION PRECONDITIONS:
===========================
- Node ids are unique
- A parent lists a child id at most once
- A node has at most one parent
- The parent -> child graph is acyclic (checked with NetworkX)

TOLERATED:
==========
- Child ids that do not resolve to a node. They are kept on the node
  and skipped by every traversal ("absent child").
"""

from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

import networkx as nx

from ..contracts.base import Error, ErrorCode, TreeValidationError
from ..contracts.narrative import NarrativeNode, NodeKind

logger = logging.getLogger(__name__)


class TreeModel:
    """
    Immutable narrative tree.

    Any structural change (a scene inserted, a chapter moved) is an
    external event: build a new TreeModel and hand it to the
    visualization. There is no diff/patch contract.
    """

    def __init__(
        self,
        nodes: Iterable[NarrativeNode],
        root_ids: Optional[Sequence[str]] = None
    ):
        self._index: Dict[str, NarrativeNode] = {}
        for node in nodes:
            if node.node_id in self._index:
                raise TreeValidationError(Error(
                    code=ErrorCode.DUPLICATE_NODE_ID,
                    message=f"Duplicate node id '{node.node_id}'",
                    context=(("node_id", node.node_id),),
                ))
            self._index[node.node_id] = node

        self._graph = self._build_graph()
        self._roots = self._resolve_roots(root_ids)

        logger.debug(
            "Built narrative tree: %d nodes, %d roots",
            len(self._index), len(self._roots)
        )

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def _build_graph(self) -> nx.DiGraph:
        """Build the ownership graph and enforce tree preconditions."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self._index)

        owner: Dict[str, str] = {}
        for node in self._index.values():
            seen = set()
            for child_id in node.child_ids:
                if child_id in seen:
                    raise TreeValidationError(Error(
                        code=ErrorCode.DUPLICATE_CHILD_ID,
                        message=f"'{node.node_id}' lists child '{child_id}' twice",
                        context=(("node_id", node.node_id), ("child_id", child_id)),
                    ))
                seen.add(child_id)

                if child_id not in self._index:
                    continue

                if child_id in owner:
                    raise TreeValidationError(Error(
                        code=ErrorCode.MULTIPLE_PARENTS,
                        message=(
                            f"'{child_id}' is a child of both "
                            f"'{owner[child_id]}' and '{node.node_id}'"
                        ),
                        context=(("child_id", child_id),),
                    ))
                owner[child_id] = node.node_id
                graph.add_edge(node.node_id, child_id)

        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            path = " -> ".join(edge[0] for edge in cycle)
            raise TreeValidationError(Error(
                code=ErrorCode.CYCLE_DETECTED,
                message=f"Cycle in narrative tree: {path}",
            ))

        return graph

    def _resolve_roots(self, root_ids: Optional[Sequence[str]]) -> Tuple[NarrativeNode, ...]:
        """
        Determine the top-level header nodes.

        Explicit ids win. Otherwise the children of the first Outline
        node, otherwise every node nobody owns.
        """
        if root_ids is not None:
            return tuple(self._index[r] for r in root_ids if r in self._index)

        for node in self._index.values():
            if node.kind is NodeKind.OUTLINE:
                return self.resolve_children(node.node_id)

        return tuple(
            node for node in self._index.values()
            if self._graph.in_degree(node.node_id) == 0
        )

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, node_id: str) -> Optional[NarrativeNode]:
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[NarrativeNode]:
        return iter(self._index.values())

    @property
    def root_nodes(self) -> Tuple[NarrativeNode, ...]:
        return self._roots

    @property
    def root_ids(self) -> Tuple[str, ...]:
        return tuple(node.node_id for node in self._roots)

    # =========================================================================
    # STRUCTURE
    # =========================================================================

    def resolve_children(self, node_id: str) -> Tuple[NarrativeNode, ...]:
        """Children in display order, skipping ids that do not resolve."""
        node = self._index.get(node_id)
        if node is None:
            return ()
        return tuple(
            self._index[child_id]
            for child_id in node.child_ids
            if child_id in self._index
        )

    def has_valid_children(self, node_id: str) -> bool:
        node = self._index.get(node_id)
        if node is None:
            return False
        return any(child_id in self._index for child_id in node.child_ids)

    def expandable_ids(self) -> Tuple[str, ...]:
        """Ids of every node with at least one resolvable child."""
        return tuple(
            node_id for node_id in self._index
            if self._graph.out_degree(node_id) > 0
        )

    def ancestors(self, node_id: str) -> List[str]:
        """Owner chain from the top-most ancestor down to the parent."""
        chain: List[str] = []
        if node_id not in self._index:
            return chain
        current = node_id
        while True:
            parents = list(self._graph.predecessors(current))
            if not parents:
                break
            current = parents[0]
            chain.append(current)
        chain.reverse()
        return chain

    def descendant_scenes(self, node_id: str) -> Tuple[NarrativeNode, ...]:
        """Scenes below (or equal to) a node, in display order."""
        node = self._index.get(node_id)
        if node is None:
            return ()
        if node.is_scene:
            return (node,)
        scenes: List[NarrativeNode] = []
        for child in self.resolve_children(node_id):
            scenes.extend(self.descendant_scenes(child.node_id))
        return tuple(scenes)
