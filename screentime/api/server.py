"""
Screen-Time Visualization: API Server
=====================================

JSON surface over one ScreenTimeVisualization instance.

Endpoints:
- GET  /health
- GET  /api/v1/view                       -> full grid DTO
- GET  /api/v1/layout                     -> header levels
- GET  /api/v1/columns                    -> final columns
- GET  /api/v1/matrix                     -> presence grid
- POST /api/v1/nodes/{node_id}/toggle     -> expand/collapse one node
- POST /api/v1/expansion/expand-all
- POST /api/v1/expansion/collapse-all
- GET  /api/v1/carousel                   -> scroll state (advanced to now)
- POST /api/v1/carousel/scroll            -> raw pane scroll
- POST /api/v1/carousel/page/{direction}  -> paged navigation
- POST /api/v1/carousel/viewport          -> viewport resize
- PUT  /api/v1/entities/filter            -> row filter
- GET  /api/v1/audit                      -> audit report

Every handler runs on the event loop thread, so the visualization has a
single writer. POST and PUT requests are audited under the "api" layer.

Usage:
    uvicorn screentime.api.server:create_app --factory --reload
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..carousel import Clock
from ..config import VisualizationConfig
from ..contracts.events import AuditEventType
from ..contracts.narrative import EntityKind
from ..engine import ScreenTimeVisualization
from ..entities import EntityFilter, EntityRegistry
from ..presence import MembershipPresenceStrategy
from ..sample import sample_registry, sample_tree
from ..tree import load_manuscript
from .mapper import (
    map_audit_entry, map_columns, map_grid, map_layout, map_scroll, map_view,
)
from .schemas import (
    ExpandRequest, FilterRequest, PageDirection, ScrollRequest, ViewportRequest,
)

logger = logging.getLogger(__name__)


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

def load_visualization(
    manuscript_path: Optional[str] = None,
    kind: EntityKind = EntityKind.CHARACTER,
    config: Optional[VisualizationConfig] = None,
    clock: Optional[Clock] = None
) -> ScreenTimeVisualization:
    """
    Build a visualization from a manuscript export, or the sample.

    The export is either a list of node records or an object with
    "nodes", optional "rootIds" and optional "entities".
    """
    if manuscript_path:
        tree, entity_records = load_manuscript(manuscript_path)
        if entity_records:
            registry = EntityRegistry.from_records(entity_records).of_kind(kind)
        else:
            registry = sample_registry(kind)
    else:
        tree = sample_tree()
        registry = sample_registry(kind)

    return ScreenTimeVisualization(
        tree,
        registry,
        MembershipPresenceStrategy(tree, registry, kind),
        config=config or VisualizationConfig.from_env(),
        clock=clock,
    )


def create_app(visualization: Optional[ScreenTimeVisualization] = None) -> FastAPI:
    """
    Application factory.

    Without an injected visualization, one is built on startup from
    SCREENTIME_MANUSCRIPT (falling back to the sample manuscript) and
    SCREENTIME_ENTITY_KIND.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.visualization is None:
            manuscript = os.environ.get("SCREENTIME_MANUSCRIPT")
            kind = EntityKind(os.environ.get("SCREENTIME_ENTITY_KIND", EntityKind.CHARACTER.value))
            logger.info("Loading manuscript: %s", manuscript or "<sample>")
            app.state.visualization = load_visualization(manuscript, kind)
        yield
        logger.info("Shutting down screen-time API")

    app = FastAPI(
        title="Screen-Time Visualization API",
        version="0.1.0",
        description="Expandable outline columns, entity presence and synchronized scrolling",
        lifespan=lifespan,
    )
    app.state.visualization = visualization

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def audit_mutations(request: Request, call_next) -> Response:
        """Audit every POST/PUT under the api layer with its status code."""
        response = await call_next(request)
        viz = request.app.state.visualization
        if viz is not None and request.method in ("POST", "PUT"):
            viz.observability.log_audit(
                "api",
                f"{request.method} {request.url.path}",
                event_type=AuditEventType.SYSTEM,
                status=str(response.status_code),
            )
        return response

    _register_routes(app)
    return app


def get_visualization(request: Request) -> ScreenTimeVisualization:
    visualization = request.app.state.visualization
    if visualization is None:
        raise HTTPException(status_code=503, detail="Visualization not initialized")
    return visualization


# =============================================================================
# ENDPOINTS
# =============================================================================

def _register_routes(app: FastAPI):

    @app.get("/health")
    async def health_check(viz: ScreenTimeVisualization = Depends(get_visualization)):
        """System status."""
        return {
            "status": "online",
            "nodes": len(viz.tree),
            "entities": len(viz.registry),
            "columns": len(viz.final_nodes()),
        }

    @app.get("/api/v1/view")
    async def get_view(viz: ScreenTimeVisualization = Depends(get_visualization)):
        viz.tick()
        return map_view(viz.view())

    @app.get("/api/v1/layout")
    async def get_layout(viz: ScreenTimeVisualization = Depends(get_visualization)):
        return map_layout(viz.layout())

    @app.get("/api/v1/columns")
    async def get_columns(viz: ScreenTimeVisualization = Depends(get_visualization)):
        return {"columns": map_columns(viz.final_nodes())}

    @app.get("/api/v1/matrix")
    async def get_matrix(viz: ScreenTimeVisualization = Depends(get_visualization)):
        return map_grid(viz.matrix())

    @app.post("/api/v1/nodes/{node_id}/toggle")
    async def toggle_node(node_id: str, viz: ScreenTimeVisualization = Depends(get_visualization)):
        """
        Expand/collapse a node.
        Unknown nodes and nodes without children answer changed=false.
        """
        changed = viz.toggle(node_id)
        return {
            "node_id": node_id,
            "changed": changed,
            "expanded": viz.expansion.is_expanded(node_id),
            "total_columns": len(viz.final_nodes()),
            "scroll": map_scroll(viz.carousel.state),
        }

    @app.post("/api/v1/expansion/expand-all")
    async def expand_all(
        body: Optional[ExpandRequest] = None,
        viz: ScreenTimeVisualization = Depends(get_visualization)
    ):
        changed = viz.expand_all(body.ids if body else None)
        return {
            "changed": changed,
            "expanded_ids": sorted(viz.expansion.expanded_ids),
            "total_columns": len(viz.final_nodes()),
        }

    @app.post("/api/v1/expansion/collapse-all")
    async def collapse_all(viz: ScreenTimeVisualization = Depends(get_visualization)):
        changed = viz.collapse_all()
        return {
            "changed": changed,
            "expanded_ids": [],
            "total_columns": len(viz.final_nodes()),
        }

    @app.get("/api/v1/carousel")
    async def get_carousel(viz: ScreenTimeVisualization = Depends(get_visualization)):
        state = viz.tick()
        return {
            "scroll": map_scroll(state),
            "visible_columns": list(viz.carousel.visible_columns()),
            "panes": viz.carousel.pane_offsets(),
        }

    @app.post("/api/v1/carousel/scroll")
    async def user_scroll(body: ScrollRequest, viz: ScreenTimeVisualization = Depends(get_visualization)):
        if not viz.carousel.has_pane(body.pane):
            viz.user_scroll(body.pane, body.offset)
            raise HTTPException(status_code=404, detail=f"Unknown pane: {body.pane}")
        state = viz.user_scroll(body.pane, body.offset)
        return {"scroll": map_scroll(state), "panes": viz.carousel.pane_offsets()}

    @app.post("/api/v1/carousel/page/{direction}")
    async def page(direction: PageDirection, viz: ScreenTimeVisualization = Depends(get_visualization)):
        if direction is PageDirection.LEFT:
            state = viz.scroll_left()
        else:
            state = viz.scroll_right()
        return {"scroll": map_scroll(state)}

    @app.post("/api/v1/carousel/viewport")
    async def set_viewport(body: ViewportRequest, viz: ScreenTimeVisualization = Depends(get_visualization)):
        state = viz.set_viewport(body.width)
        return {
            "scroll": map_scroll(state),
            "visible_columns": list(viz.carousel.visible_columns()),
        }

    @app.put("/api/v1/entities/filter")
    async def set_filter(body: FilterRequest, viz: ScreenTimeVisualization = Depends(get_visualization)):
        viz.set_entity_filter(EntityFilter(
            selected_ids=frozenset(body.selected_ids) if body.selected_ids is not None else None,
            query=body.query,
            hidden_tiers=frozenset(body.hidden_tiers),
        ))
        return {
            "visible": [e.entity_id for e in viz.visible_entities()],
            "groups": {
                tier: [e.entity_id for e in entities]
                for tier, entities in viz.registry.groups().items()
            },
        }

    @app.get("/api/v1/audit")
    async def get_audit(
        layer: Optional[str] = None,
        limit: int = 100,
        viz: ScreenTimeVisualization = Depends(get_visualization)
    ):
        """Audit report plus the most recent entries."""
        observability = viz.observability
        entries = observability.get_layer_log(layer) if layer else observability.get_unified_log()
        report = observability.generate_audit_report()
        report["entries"] = [map_audit_entry(e) for e in entries[-limit:]] if limit > 0 else []
        return report
