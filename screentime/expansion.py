"""
Expansion State
===============

Set of expanded node ids. Absence means collapsed (the default).

MUTATION CONTRACT:
==================
- Mutated only through toggle / expand_all / collapse_all / rebind
- Every effective mutation bumps `version` and notifies listeners
- Listeners must recompute every derived structure wholesale;
  there is no incremental update contract
- Unknown ids and nodes without resolvable children are no-ops
"""

from __future__ import annotations
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Set

from .tree import TreeModel


ExpansionListener = Callable[["ExpansionState"], None]


class ExpansionState:
    """Expanded-node set owned by one visualization instance."""

    def __init__(self, tree: TreeModel, expanded: Optional[Iterable[str]] = None):
        self._tree = tree
        self._expanded: Set[str] = set()
        self._listeners: List[ExpansionListener] = []
        self._version = 0
        if expanded:
            self._expanded.update(i for i in expanded if self._expandable(i))

    def _expandable(self, node_id: str) -> bool:
        return self._tree.has_valid_children(node_id)

    def _changed(self):
        self._version += 1
        for listener in list(self._listeners):
            listener(self)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._expanded

    def __len__(self) -> int:
        return len(self._expanded)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._expanded))

    @property
    def expanded_ids(self) -> FrozenSet[str]:
        return frozenset(self._expanded)

    @property
    def version(self) -> int:
        """Incremented on every effective mutation."""
        return self._version

    @property
    def tree(self) -> TreeModel:
        return self._tree

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def toggle(self, node_id: str) -> bool:
        """
        Flip membership of a node.

        Returns True when the state changed. Unknown ids and nodes
        without a resolvable child are ignored.
        """
        if not self._expandable(node_id):
            return False
        if node_id in self._expanded:
            self._expanded.discard(node_id)
        else:
            self._expanded.add(node_id)
        self._changed()
        return True

    def expand_all(self, node_ids: Optional[Iterable[str]] = None) -> bool:
        """
        Expand the given ids (every expandable node when omitted).

        Ids that toggle() would ignore are skipped here as well.
        """
        if node_ids is None:
            node_ids = self._tree.expandable_ids()
        added = {i for i in node_ids if self._expandable(i)} - self._expanded
        if not added:
            return False
        self._expanded.update(added)
        self._changed()
        return True

    def collapse_all(self) -> bool:
        if not self._expanded:
            return False
        self._expanded.clear()
        self._changed()
        return True

    def rebind(self, tree: TreeModel) -> bool:
        """
        Point at a replacement tree, dropping ids that are no longer
        expandable there. Always notifies: a new tree is a new layout.
        """
        self._tree = tree
        self._expanded = {i for i in self._expanded if self._expandable(i)}
        self._changed()
        return True

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def subscribe(self, listener: ExpansionListener) -> Callable[[], None]:
        """Register an invalidation listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
