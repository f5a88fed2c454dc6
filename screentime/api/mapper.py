"""
API Mapper
==========

Transforms frozen view models into JSON DTOs for the frontend grid.
Values pass through unchanged; no rounding or smoothing of presence.
"""

from typing import Any, Dict, List

from ..carousel import ScrollState
from ..contracts.events import AuditLogEntry
from ..contracts.layout import FinalNodeList, LayeredColumnLayout
from ..presence import PresenceGrid
from ..views import HeaderCellView, ScreenTimeView


def map_scroll(state: ScrollState) -> Dict[str, Any]:
    return {
        "offset": state.offset,
        "max_offset": state.max_offset,
        "column_width": state.column_width,
        "viewport_width": state.viewport_width,
        "total_columns": state.total_columns,
        "phase": state.phase.value,
        "animating": state.animating,
        "target_offset": state.target_offset,
    }


def _map_header_cell(cell: HeaderCellView) -> Dict[str, Any]:
    return {
        "node_id": cell.node_id,
        "kind": cell.kind.value,
        "label": cell.label,
        "title": cell.title,
        "level": cell.level,
        "span": cell.span,
        "position": cell.position,
        "grid_column": f"{cell.grid_column_start} / {cell.grid_column_end}",
        "is_expanded": cell.is_expanded,
        "is_expandable": cell.is_expandable,
    }


def map_view(view: ScreenTimeView) -> Dict[str, Any]:
    """Map a ScreenTimeView to the grid DTO."""
    return {
        "header_levels": [
            [_map_header_cell(cell) for cell in level]
            for level in view.header_levels
        ],
        "columns": [
            {
                "index": column.index,
                "node_id": column.node_id,
                "kind": column.kind.value,
                "label": column.label,
                "x": column.x,
            }
            for column in view.columns
        ],
        "rows": [
            {
                "entity_id": row.entity_id,
                "display_name": row.display_name,
                "color_token": row.color_token,
                "tier": row.tier,
                "screen_time": row.screen_time,
                "cells": [
                    {"node_id": c.node_id, "percentage": c.percentage, "tier": c.tier}
                    for c in row.cells
                ],
            }
            for row in view.rows
        ],
        "scroll": map_scroll(view.scroll),
        "visible_columns": list(view.visible_columns),
        "expanded_ids": sorted(view.expanded_ids),
        "total_columns": view.total_columns,
        "grid_width": view.grid_width,
        "header_height": view.header_height,
        "label_column_width": view.label_column_width,
    }


def map_layout(layout: LayeredColumnLayout) -> Dict[str, Any]:
    return {
        "total_columns": layout.total_columns,
        "levels": [
            [
                {
                    "node_id": entry.node_id,
                    "level": entry.level,
                    "span": entry.span,
                    "position": entry.position,
                    "parent_path": list(entry.parent_path),
                }
                for entry in level
            ]
            for level in layout.levels
        ],
    }


def map_columns(final_nodes: FinalNodeList) -> List[Dict[str, Any]]:
    return [
        {"index": index, "node_id": node.node_id, "kind": node.kind.value, "title": node.display_title}
        for index, node in enumerate(final_nodes)
    ]


def map_grid(grid: PresenceGrid) -> Dict[str, Any]:
    return {
        "node_ids": list(grid.node_ids),
        "screen_time": grid.screen_time(),
        "rows": [
            {
                "entity_id": row.entity.entity_id,
                "cells": [
                    {"node_id": c.final_node_id, "percentage": c.percentage, "tier": c.tier}
                    for c in row.cells
                ],
            }
            for row in grid.rows
        ],
    }


def map_audit_entry(entry: AuditLogEntry) -> Dict[str, Any]:
    return {
        "entry_id": entry.entry_id,
        "event_type": entry.event_type.value,
        "timestamp": entry.timestamp.to_iso(),
        "layer": entry.layer,
        "action": entry.action,
        "entity_id": entry.entity_id,
        "metadata": dict(entry.metadata),
        "sequence": entry.sequence,
    }
