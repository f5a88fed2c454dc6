"""
Layout Layer

Tree + expansion -> header levels and grid columns.

GUARANTEES:
===========
- Both outputs are pure functions of (tree, expansion)
- Header column count == grid column count (checked by check_alignment)
"""

from __future__ import annotations

from ..contracts.base import Error, ErrorCode, LayoutInvariantError
from ..contracts.layout import FinalNodeList, LayeredColumnLayout
from .columns import ColumnLayoutEngine
from .final_nodes import FinalColumnResolver
from .traversal import open_children


def check_alignment(layout: LayeredColumnLayout, final_nodes: FinalNodeList) -> None:
    """
    Verify the header/grid contract.

    - level-0 span sum == number of final columns
    - every level is contiguous from column 0 with no overlaps
      (deeper levels may skip columns owned by collapsed ancestors, but
      never overlap or run past the total)
    """
    total = layout.total_columns
    if total != len(final_nodes):
        raise LayoutInvariantError(Error(
            code=ErrorCode.LAYOUT_MISALIGNED,
            message=f"Header spans {total} columns, grid has {len(final_nodes)}",
        ))

    for level_index, entries in enumerate(layout.levels):
        cursor = 0
        for entry in entries:
            contiguous = entry.position == cursor if level_index == 0 else entry.position >= cursor
            if entry.span < 1 or not contiguous or entry.end > total:
                raise LayoutInvariantError(Error(
                    code=ErrorCode.LAYOUT_MISALIGNED,
                    message=(
                        f"Entry '{entry.node_id}' at level {level_index} "
                        f"covers [{entry.position}, {entry.end}) after column {cursor}"
                    ),
                ))
            cursor = entry.end
        if level_index == 0 and cursor != total:
            raise LayoutInvariantError(Error(
                code=ErrorCode.LAYOUT_MISALIGNED,
                message=f"Level 0 ends at column {cursor}, expected {total}",
            ))


__all__ = [
    'ColumnLayoutEngine', 'FinalColumnResolver', 'open_children', 'check_alignment',
]
