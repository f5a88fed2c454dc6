"""
Screen-Time Visualization Orchestrator

Unified interface for one screen-time visualization instance
(character, location, object or lore rows against the outline).

DESIGN PRINCIPLES:
==================
1. All shared state is owned by the instance and injected through the
   constructor; there is no process-wide registry
2. Every expansion change or tree replacement recomputes layout and
   columns wholesale, then pushes the new column count to the carousel
3. Presence is recomputed on every matrix()/view() call
4. All operations are traceable through observability

LAYER FLOW:
===========
TreeModel + ExpansionState -> ColumnLayoutEngine (header levels)
                           -> FinalColumnResolver (grid columns)
                           -> PresenceMatrix (cells, per call)
FinalNodeList length       -> ScrollCarousel (scroll bounds)
"""

from __future__ import annotations
from typing import Iterable, Optional, Tuple, Union
import logging
import time

from .carousel import Clock, ScrollCarousel, ScrollState
from .config import VisualizationConfig
from .contracts.base import ErrorCode
from .contracts.events import AuditEventType
from .contracts.layout import FinalNodeList, LayeredColumnLayout
from .contracts.narrative import Entity
from .entities import EntityFilter, EntityRegistry
from .expansion import ExpansionState
from .layout import ColumnLayoutEngine, FinalColumnResolver, check_alignment
from .observability import ObservabilityEngine
from .presence import PresenceFunction, PresenceGrid, PresenceMatrix, PresenceStrategy
from .tree import TreeModel
from .views import ScreenTimeView, build_view

logger = logging.getLogger(__name__)


class ScreenTimeVisualization:
    """
    One visualization instance.

    Single-writer: hosts with several threads must funnel every call
    through one queue; traversals do not tolerate concurrent mutation.
    """

    def __init__(
        self,
        tree: TreeModel,
        registry: EntityRegistry,
        strategy: Union[PresenceStrategy, PresenceFunction],
        config: Optional[VisualizationConfig] = None,
        clock: Optional[Clock] = None,
        observability: Optional[ObservabilityEngine] = None,
        entity_filter: Optional[EntityFilter] = None
    ):
        self._config = config or VisualizationConfig()
        self._tree = tree
        self._registry = registry
        self._matrix = PresenceMatrix(strategy)
        self._filter = entity_filter or EntityFilter()
        self._observability = observability or ObservabilityEngine(self._config.observability)

        self._layout_engine = ColumnLayoutEngine()
        self._resolver = FinalColumnResolver()
        self._carousel = ScrollCarousel(
            column_width=self._config.column_width,
            viewport_width=self._config.viewport_width,
            page_columns=self._config.page_columns,
            duration_ms=self._config.animation_duration_ms,
            snap_threshold_px=self._config.snap_threshold_px,
            panes=self._config.panes,
            clock=clock,
        )

        self._layout = LayeredColumnLayout()
        self._final_nodes = FinalNodeList()

        self._expansion = ExpansionState(tree)
        self._expansion.subscribe(self._on_expansion_changed)
        self._recompute()

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def config(self) -> VisualizationConfig:
        return self._config

    @property
    def tree(self) -> TreeModel:
        return self._tree

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    @property
    def expansion(self) -> ExpansionState:
        return self._expansion

    @property
    def carousel(self) -> ScrollCarousel:
        return self._carousel

    @property
    def entity_filter(self) -> EntityFilter:
        return self._filter

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    def _on_expansion_changed(self, expansion: ExpansionState):
        self._recompute()

    def _recompute(self):
        started = time.perf_counter()

        layout = self._layout_engine.compute(self._tree, self._expansion)
        final_nodes = self._resolver.resolve(self._tree, self._expansion)
        check_alignment(layout, final_nodes)
        self._layout = layout
        self._final_nodes = final_nodes

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        self._observability.collect_metric("layout_recompute_ms", elapsed_ms)
        self._observability.collect_metric("final_column_count", len(final_nodes))
        self._observability.log_audit(
            "layout", "recompute",
            event_type=AuditEventType.LAYOUT,
            columns=str(len(final_nodes)),
            levels=str(layout.depth),
            expansion_version=str(self._expansion.version),
        )
        logger.debug(
            "Recomputed layout: %d columns over %d levels in %.3f ms",
            len(final_nodes), layout.depth, elapsed_ms
        )

        previous = self._carousel.offset
        if self._carousel.set_geometry(total_columns=len(final_nodes)):
            self._record_clamp(previous)

    def _record_clamp(self, previous: float):
        self._observability.collect_metric("carousel_clamps_total", 1)
        self._observability.log_audit(
            "carousel", "clamp",
            event_type=AuditEventType.NAVIGATION,
            previous_offset=f"{previous:.2f}",
            offset=f"{self._carousel.offset:.2f}",
        )

    def layout(self) -> LayeredColumnLayout:
        return self._layout

    def final_nodes(self) -> FinalNodeList:
        return self._final_nodes

    def visible_entities(self) -> Tuple[Entity, ...]:
        return self._filter.visible(self._registry)

    def matrix(self) -> PresenceGrid:
        """Fresh presence grid for the current columns and rows."""
        grid = self._matrix.compute(self.visible_entities(), self._final_nodes)
        self._observability.collect_metric("presence_cells_total", grid.cell_count)
        self._observability.log_audit(
            "presence", "compute",
            event_type=AuditEventType.PRESENCE,
            rows=str(len(grid.rows)),
            columns=str(len(grid.node_ids)),
        )
        return grid

    def view(self) -> ScreenTimeView:
        return build_view(
            tree=self._tree,
            expanded=self._expansion,
            layout=self._layout,
            final_nodes=self._final_nodes,
            grid=self.matrix(),
            scroll=self._carousel.state,
            visible_columns=self._carousel.visible_columns(),
            config=self._config,
        )

    # =========================================================================
    # EXPANSION
    # =========================================================================

    def toggle(self, node_id: str) -> bool:
        """Expand/collapse one node. Unknown or leaf nodes are no-ops."""
        changed = self._expansion.toggle(node_id)
        if changed:
            self._observability.log_audit(
                "expansion", "toggle",
                event_type=AuditEventType.EXPANSION,
                entity_id=node_id,
                expanded=str(self._expansion.is_expanded(node_id)),
            )
        else:
            reason = ErrorCode.UNKNOWN_NODE.name if node_id not in self._tree else "NOT_EXPANDABLE"
            self._observability.log_audit(
                "expansion", "toggle_ignored",
                event_type=AuditEventType.NO_OP,
                entity_id=node_id,
                reason=reason,
            )
        return changed

    def expand_all(self, node_ids: Optional[Iterable[str]] = None) -> bool:
        changed = self._expansion.expand_all(node_ids)
        self._observability.log_audit(
            "expansion", "expand_all",
            event_type=AuditEventType.EXPANSION if changed else AuditEventType.NO_OP,
            expanded=str(len(self._expansion)),
        )
        return changed

    def collapse_all(self) -> bool:
        changed = self._expansion.collapse_all()
        self._observability.log_audit(
            "expansion", "collapse_all",
            event_type=AuditEventType.EXPANSION if changed else AuditEventType.NO_OP,
        )
        return changed

    def replace_tree(
        self,
        tree: TreeModel,
        strategy: Optional[Union[PresenceStrategy, PresenceFunction]] = None
    ):
        """
        Swap in a new tree (external mutation). Layout is rebuilt from
        scratch; expansion keeps only ids still expandable.
        """
        self._tree = tree
        if strategy is not None:
            self._matrix = PresenceMatrix(strategy)
        self._observability.log_audit(
            "layout", "replace_tree",
            event_type=AuditEventType.SYSTEM,
            nodes=str(len(tree)),
        )
        self._expansion.rebind(tree)

    # =========================================================================
    # ENTITY ROWS
    # =========================================================================

    def set_entity_filter(self, entity_filter: EntityFilter):
        self._filter = entity_filter
        self._observability.log_audit(
            "filter", "set_filter",
            event_type=AuditEventType.FILTER,
            query=entity_filter.query,
            visible=str(len(self.visible_entities())),
        )

    def toggle_entity(self, entity_id: str) -> bool:
        if entity_id not in self._registry:
            self._observability.log_audit(
                "filter", "toggle_entity_ignored",
                event_type=AuditEventType.NO_OP,
                entity_id=entity_id,
                reason=ErrorCode.UNKNOWN_ENTITY.name,
            )
            return False
        self.set_entity_filter(self._filter.toggle_entity(entity_id, self._registry))
        return True

    def toggle_tier(self, tier: str):
        self.set_entity_filter(self._filter.toggle_tier(tier))

    def search(self, query: str):
        self.set_entity_filter(self._filter.with_query(query))

    # =========================================================================
    # SCROLLING
    # =========================================================================

    def set_viewport(self, width: float) -> ScrollState:
        previous = self._carousel.offset
        if self._carousel.set_geometry(viewport_width=width):
            self._record_clamp(previous)
        return self._carousel.state

    def user_scroll(self, pane: str, offset: float) -> ScrollState:
        if not self._carousel.has_pane(pane):
            self._observability.log_audit(
                "carousel", "scroll_ignored",
                event_type=AuditEventType.NO_OP,
                reason=ErrorCode.UNKNOWN_PANE.name,
                pane=pane,
            )
            return self._carousel.state
        return self._carousel.user_scroll(pane, offset)

    def scroll_left(self, now_ms: Optional[float] = None) -> ScrollState:
        return self._page("left", now_ms)

    def scroll_right(self, now_ms: Optional[float] = None) -> ScrollState:
        return self._page("right", now_ms)

    def _page(self, direction: str, now_ms: Optional[float]) -> ScrollState:
        if direction == "left":
            state = self._carousel.scroll_left(now_ms)
        else:
            state = self._carousel.scroll_right(now_ms)
        self._observability.collect_metric(
            "carousel_page_commands_total", 1, {"direction": direction}
        )
        self._observability.log_audit(
            "carousel", f"scroll_{direction}",
            event_type=AuditEventType.NAVIGATION,
            target=f"{state.target_offset if state.animating else state.offset:.2f}",
        )
        return state

    def tick(self, now_ms: Optional[float] = None) -> ScrollState:
        return self._carousel.tick(now_ms)

    async def animate(self, frame_interval: float = 1 / 60) -> ScrollState:
        return await self._carousel.animate(frame_interval)
