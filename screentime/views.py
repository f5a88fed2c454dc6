"""
Screen-Time View Contracts

Responsibility:
Deterministic transformation of (layout, columns, presence, scroll state)
into a renderable view.
Input: LayeredColumnLayout + FinalNodeList + PresenceGrid + ScrollState
Output: ScreenTimeView (Visualization)

No layout logic is left for the renderer: grid lines, labels, spans and
pixel widths are pre-calculated here.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Container, FrozenSet, Tuple
import re

from .carousel import ScrollState
from .config import VisualizationConfig
from .contracts.layout import FinalNodeList, LayeredColumnLayout
from .contracts.narrative import NarrativeNode, NodeKind
from .presence import PresenceGrid
from .tree import TreeModel


_SCENE_NUMBER = re.compile(r"scene\s*(\d+)", re.IGNORECASE)
_TITLE_SEPARATORS = re.compile(r"[-:]")


def header_label(node: NarrativeNode) -> str:
    """
    Short header text.

    Scenes render as "Scene - <n>"; everything else uses its title,
    falling back to "<kind> <id>".
    """
    title = node.display_title or f"{node.kind.value} {node.node_id}"
    if node.kind is not NodeKind.SCENE:
        return title

    match = _SCENE_NUMBER.search(title)
    if match:
        return f"Scene - {match.group(1)}"
    last_part = _TITLE_SEPARATORS.split(title)[-1].strip()
    return f"Scene - {last_part}"


@dataclass(frozen=True)
class HeaderCellView:
    """One header cell, ready for a CSS grid row."""
    node_id: str
    kind: NodeKind
    label: str
    title: str
    level: int
    span: int
    position: int
    is_expanded: bool
    is_expandable: bool

    @property
    def grid_column_start(self) -> int:
        return self.position + 1

    @property
    def grid_column_end(self) -> int:
        return self.position + self.span + 1


@dataclass(frozen=True)
class ColumnView:
    """One grid column (a final node)."""
    index: int
    node_id: str
    kind: NodeKind
    label: str
    x: float


@dataclass(frozen=True)
class MatrixCellView:
    node_id: str
    percentage: float
    tier: str


@dataclass(frozen=True)
class MatrixRowView:
    """One frozen-label row plus its cells."""
    entity_id: str
    display_name: str
    color_token: str
    tier: str
    screen_time: float
    cells: Tuple[MatrixCellView, ...]


@dataclass(frozen=True)
class ScreenTimeView:
    """
    Fully calculated screen-time visualization.

    DETERMINISTIC:
    Same tree + same expansion + same entity rows + same scroll state
    = identical view.
    """
    header_levels: Tuple[Tuple[HeaderCellView, ...], ...]
    columns: Tuple[ColumnView, ...]
    rows: Tuple[MatrixRowView, ...]
    scroll: ScrollState
    visible_columns: Tuple[int, int]
    expanded_ids: FrozenSet[str]
    grid_width: float
    header_height: float
    label_column_width: float

    @property
    def total_columns(self) -> int:
        return len(self.columns)


def build_view(
    tree: TreeModel,
    expanded: Container[str],
    layout: LayeredColumnLayout,
    final_nodes: FinalNodeList,
    grid: PresenceGrid,
    scroll: ScrollState,
    visible_columns: Tuple[int, int],
    config: VisualizationConfig
) -> ScreenTimeView:
    """Single point of conversion from engine data to view models."""
    header_levels = []
    for entries in layout.levels:
        cells = []
        for entry in entries:
            node = tree.get(entry.node_id)
            cells.append(HeaderCellView(
                node_id=entry.node_id,
                kind=node.kind,
                label=header_label(node),
                title=node.display_title,
                level=entry.level,
                span=entry.span,
                position=entry.position,
                is_expanded=entry.node_id in expanded,
                is_expandable=tree.has_valid_children(entry.node_id),
            ))
        header_levels.append(tuple(cells))

    columns = tuple(
        ColumnView(
            index=index,
            node_id=node.node_id,
            kind=node.kind,
            label=header_label(node),
            x=index * config.column_width,
        )
        for index, node in enumerate(final_nodes)
    )

    screen_time = grid.screen_time()
    rows = tuple(
        MatrixRowView(
            entity_id=row.entity.entity_id,
            display_name=row.entity.display_name,
            color_token=row.entity.color_token,
            tier=row.entity.tier,
            screen_time=screen_time.get(row.entity.entity_id, 0.0),
            cells=tuple(
                MatrixCellView(
                    node_id=cell.final_node_id,
                    percentage=cell.percentage,
                    tier=cell.tier,
                )
                for cell in row.cells
            ),
        )
        for row in grid.rows
    )

    return ScreenTimeView(
        header_levels=tuple(header_levels),
        columns=columns,
        rows=rows,
        scroll=scroll,
        visible_columns=visible_columns,
        expanded_ids=frozenset(i for i in tree.expandable_ids() if i in expanded),
        grid_width=len(columns) * config.column_width,
        header_height=max(1, layout.depth) * config.header_row_height,
        label_column_width=config.label_column_width,
    )
