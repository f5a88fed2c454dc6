#!/usr/bin/env python3
"""
Screen-Time Demo - Text Rendering of the Grid
=============================================

Loads a manuscript (or the built-in sample), applies expansion and
paging commands, and prints the header levels and presence grid.

RUN:
    python screentime_demo.py
    python screentime_demo.py --expand-all
    python screentime_demo.py --expand act-1 --expand ch-1 --kind location
    python screentime_demo.py --manuscript export.json --page-right 2 --viewport 768
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

from screentime import ManualClock, ScreenTimeVisualization, VisualizationConfig
from screentime.api.mapper import map_scroll
from screentime.api.server import load_visualization
from screentime.contracts.narrative import EntityKind
from screentime.views import ScreenTimeView


CELL_WIDTH = 12
LABEL_WIDTH = 20


# =============================================================================
# TEXT RENDERING
# =============================================================================

def _fit(text: str, width: int) -> str:
    if len(text) > width - 1:
        text = text[:width - 2] + "~"
    return text.ljust(width)


def render_view(view: ScreenTimeView) -> str:
    """Render header levels and the visible part of the grid as text."""
    first, last = view.visible_columns
    if view.scroll.viewport_width == 0:
        first, last = 0, view.total_columns

    lines = []
    for level in view.header_levels:
        line = " " * LABEL_WIDTH
        for cell in level:
            start = max(cell.position, first)
            end = min(cell.position + cell.span, last)
            if start >= end:
                continue
            pad = (start - first) * CELL_WIDTH - (len(line) - LABEL_WIDTH)
            marker = "-" if cell.is_expanded else ("+" if cell.is_expandable else " ")
            line += " " * max(pad, 0) + _fit(f"{marker}{cell.label}", (end - start) * CELL_WIDTH)
        lines.append(line.rstrip())

    lines.append("=" * (LABEL_WIDTH + (last - first) * CELL_WIDTH))
    for row in view.rows:
        line = _fit(f"{row.display_name} ({row.screen_time:.0f})", LABEL_WIDTH)
        for cell in row.cells[first:last]:
            line += _fit(f"{cell.percentage:g}%" if cell.percentage else ".", CELL_WIDTH)
        lines.append(line.rstrip())
    return "\n".join(lines)


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="Screen-Time Demo - Text Rendering of the Grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python screentime_demo.py                        # Collapsed sample outline
  python screentime_demo.py --expand-all           # Every act, chapter and scene
  python screentime_demo.py --kind object          # Object rows
  python screentime_demo.py --viewport 768 --page-right 1
        """
    )

    parser.add_argument(
        '--manuscript', '-m',
        default=None,
        help='Path to a manuscript export (JSON); defaults to the sample'
    )

    parser.add_argument(
        '--kind', '-k',
        choices=[kind.value for kind in EntityKind],
        default=EntityKind.CHARACTER.value,
        help='Entity rows to show'
    )

    parser.add_argument(
        '--expand', '-e',
        action='append',
        default=[],
        help='Node id to expand (repeatable, applied in order)'
    )

    parser.add_argument(
        '--expand-all',
        action='store_true',
        help='Expand every expandable node'
    )

    parser.add_argument(
        '--viewport', '-w',
        type=float,
        default=0,
        help='Viewport width in pixels (0 shows every column)'
    )

    parser.add_argument(
        '--page-right', '-p',
        type=int,
        default=0,
        help='Number of page-right commands to run to completion'
    )

    parser.add_argument(
        '--audit',
        action='store_true',
        help='Print the audit report as JSON'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging'
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    clock = ManualClock()
    config = VisualizationConfig.from_env()
    try:
        viz = load_visualization(args.manuscript, EntityKind(args.kind), config, clock)
    except FileNotFoundError:
        print(f"Error: Manuscript not found at {args.manuscript}")
        sys.exit(1)

    if args.expand_all:
        viz.expand_all()
    for node_id in args.expand:
        if not viz.toggle(node_id):
            print(f"Ignored: {node_id} is unknown or has no children")

    viz.set_viewport(args.viewport)
    for _ in range(args.page_right):
        viz.scroll_right()
        for _ in clock_frames(viz, clock):
            pass

    view = viz.view()
    print(render_view(view))
    print()
    print(f"Columns: {view.total_columns}  Scroll: {json.dumps(map_scroll(view.scroll))}")

    if args.audit:
        print(json.dumps(viz.observability.generate_audit_report(), indent=2, default=str))


def clock_frames(viz: ScreenTimeVisualization, clock: ManualClock, step_ms: float = 16):
    """Advance the manual clock frame by frame until the carousel is Idle."""
    while viz.carousel.animating:
        clock.advance(step_ms)
        yield viz.tick()


if __name__ == "__main__":
    main()
