"""
Presence Matrix
===============

Glue between the entity rows, the final columns and an injected
presence strategy.

CONTRACT:
=========
- Exactly one strategy call per (visible entity, final node) cell
  per compute() call
- No caching across calls: callers' data may change without notice
- No domain knowledge: aggregation for collapsed composite nodes and
  range checking of returned values belong to the strategy
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from ..contracts.layout import FinalNodeList
from ..contracts.narrative import Entity, NarrativeNode, PresenceCell, PresenceResult


class PresenceStrategy(ABC):
    """
    Injected presence computation.

    Implementations MUST be pure for a given snapshot of caller data and
    SHOULD return percentages in [0, 100]. The matrix does not check.
    """

    @abstractmethod
    def presence(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        ...

    def __call__(self, entity_id: str, node: NarrativeNode) -> PresenceResult:
        return self.presence(entity_id, node)


PresenceFunction = Callable[[str, NarrativeNode], PresenceResult]


@dataclass(frozen=True)
class PresenceRow:
    """All cells for one entity, in column order."""
    entity: Entity
    cells: Tuple[PresenceCell, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class PresenceGrid:
    """
    Entity x final-node grid for one layout.

    DERIVED VIEW:
    =============
    Discarded on the next recomputation, never patched.
    """
    node_ids: Tuple[str, ...]
    rows: Tuple[PresenceRow, ...] = field(default_factory=tuple)

    @property
    def cell_count(self) -> int:
        return sum(len(row) for row in self.rows)

    @property
    def entity_ids(self) -> Tuple[str, ...]:
        return tuple(row.entity.entity_id for row in self.rows)

    def row(self, entity_id: str) -> Optional[PresenceRow]:
        for row in self.rows:
            if row.entity.entity_id == entity_id:
                return row
        return None

    def column(self, node_id: str) -> Tuple[PresenceCell, ...]:
        if node_id not in self.node_ids:
            return ()
        index = self.node_ids.index(node_id)
        return tuple(row.cells[index] for row in self.rows)

    def percentages(self) -> np.ndarray:
        """(entities, columns) float array of raw percentages."""
        if not self.rows:
            return np.zeros((0, len(self.node_ids)), dtype=float)
        return np.array(
            [[cell.percentage for cell in row.cells] for row in self.rows],
            dtype=float,
        ).reshape(len(self.rows), len(self.node_ids))

    def screen_time(self) -> Dict[str, float]:
        """Mean presence per entity across the visible columns."""
        values = self.percentages()
        if values.shape[1] == 0:
            return {entity_id: 0.0 for entity_id in self.entity_ids}
        means = values.mean(axis=1)
        return {
            entity_id: float(mean)
            for entity_id, mean in zip(self.entity_ids, means)
        }

    def __iter__(self) -> Iterator[PresenceRow]:
        return iter(self.rows)


class PresenceMatrix:
    """Invokes the strategy once per visible cell."""

    def __init__(self, strategy: Union[PresenceStrategy, PresenceFunction]):
        self._strategy = strategy

    def compute(
        self,
        entities: Sequence[Entity],
        final_nodes: FinalNodeList
    ) -> PresenceGrid:
        rows = []
        for entity in entities:
            cells = []
            for node in final_nodes:
                result = self._strategy(entity.entity_id, node)
                cells.append(PresenceCell(
                    entity_id=entity.entity_id,
                    final_node_id=node.node_id,
                    percentage=result.percentage,
                    tier=result.tier,
                ))
            rows.append(PresenceRow(entity=entity, cells=tuple(cells)))
        return PresenceGrid(node_ids=final_nodes.node_ids, rows=tuple(rows))
