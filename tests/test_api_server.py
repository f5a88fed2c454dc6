"""
API Server Tests
================

HTTP surface over an injected visualization (FastAPI TestClient).
"""

import json

import pytest
from fastapi.testclient import TestClient

from screentime.api import create_app, load_visualization
from screentime.carousel import ManualClock
from screentime.config import VisualizationConfig
from screentime.contracts.narrative import EntityKind
from screentime.engine import ScreenTimeVisualization

from tests.fixtures import CountingStrategy, nine_entity_registry, scenario_tree


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def client(clock):
    viz = ScreenTimeVisualization(
        scenario_tree(),
        nine_entity_registry(),
        CountingStrategy(),
        config=VisualizationConfig(column_width=100, viewport_width=100),
        clock=clock,
    )
    with TestClient(create_app(viz)) as test_client:
        yield test_client


class TestReadEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "online", "nodes": 6, "entities": 9, "columns": 1}

    def test_view(self, client):
        body = client.get("/api/v1/view").json()
        assert body["total_columns"] == 1
        assert body["header_levels"][0][0]["label"] == "Act 1"
        assert body["header_levels"][0][0]["grid_column"] == "1 / 2"
        assert len(body["rows"]) == 9
        assert body["scroll"]["phase"] == "idle"

    def test_layout_and_columns(self, client):
        client.post("/api/v1/nodes/act1/toggle")

        layout = client.get("/api/v1/layout").json()
        assert layout["total_columns"] == 2
        assert [e["node_id"] for e in layout["levels"][1]] == ["ch1", "ch2"]

        columns = client.get("/api/v1/columns").json()["columns"]
        assert [c["node_id"] for c in columns] == ["ch1", "ch2"]

    def test_matrix(self, client):
        body = client.get("/api/v1/matrix").json()
        assert body["node_ids"] == ["act1"]
        assert body["rows"][0]["cells"] == [{"node_id": "act1", "percentage": 10, "tier": "Stub"}]
        assert body["screen_time"]["e0"] == 10.0


class TestExpansionEndpoints:

    def test_toggle(self, client):
        body = client.post("/api/v1/nodes/act1/toggle").json()
        assert body["changed"] is True
        assert body["expanded"] is True
        assert body["total_columns"] == 2

    def test_toggle_unknown_is_not_an_error(self, client):
        response = client.post("/api/v1/nodes/ghost/toggle")
        assert response.status_code == 200
        assert response.json()["changed"] is False

    def test_expand_all_without_body(self, client):
        body = client.post("/api/v1/expansion/expand-all").json()
        assert body["expanded_ids"] == ["act1", "ch1", "ch2"]
        assert body["total_columns"] == 3

    def test_expand_selected(self, client):
        body = client.post("/api/v1/expansion/expand-all", json={"ids": ["act1"]}).json()
        assert body["expanded_ids"] == ["act1"]

    def test_collapse_all(self, client):
        client.post("/api/v1/expansion/expand-all")
        body = client.post("/api/v1/expansion/collapse-all").json()
        assert body == {"changed": True, "expanded_ids": [], "total_columns": 1}


class TestCarouselEndpoints:

    def test_user_scroll_syncs_panes(self, client):
        client.post("/api/v1/expansion/expand-all")
        body = client.post("/api/v1/carousel/scroll", json={"pane": "header", "offset": 150}).json()
        assert body["scroll"]["offset"] == 150
        assert set(body["panes"].values()) == {150}

    def test_unknown_pane(self, client):
        response = client.post("/api/v1/carousel/scroll", json={"pane": "minimap", "offset": 1})
        assert response.status_code == 404

    def test_malformed_scroll_body(self, client):
        response = client.post("/api/v1/carousel/scroll", json={"pane": "header"})
        assert response.status_code == 422

    def test_page_right_animates(self, client, clock):
        client.post("/api/v1/expansion/expand-all")
        body = client.post("/api/v1/carousel/page/right").json()
        assert body["scroll"]["animating"] is True
        assert body["scroll"]["target_offset"] == 200

        clock.advance(1200)
        state = client.get("/api/v1/carousel").json()
        assert state["scroll"]["offset"] == 200
        assert state["scroll"]["phase"] == "idle"
        assert state["visible_columns"] == [2, 3]

    def test_invalid_direction(self, client):
        assert client.post("/api/v1/carousel/page/up").status_code == 422

    def test_viewport(self, client):
        client.post("/api/v1/expansion/expand-all")
        body = client.post("/api/v1/carousel/viewport", json={"width": 300}).json()
        assert body["scroll"]["max_offset"] == 0
        assert client.post("/api/v1/carousel/viewport", json={"width": -1}).status_code == 422

    def test_non_finite_scroll_rejected(self, client):
        client.post("/api/v1/expansion/expand-all")
        client.post("/api/v1/carousel/scroll", json={"pane": "content", "offset": 120})

        for literal in ("NaN", "Infinity", "-Infinity"):
            response = client.post(
                "/api/v1/carousel/scroll",
                content='{"pane": "content", "offset": %s}' % literal,
                headers={"content-type": "application/json"},
            )
            assert response.status_code == 422

        state = client.get("/api/v1/carousel")
        assert state.status_code == 200
        assert state.json()["scroll"]["offset"] == 120
        assert client.get("/api/v1/view").status_code == 200

    def test_non_finite_viewport_rejected(self, client):
        response = client.post(
            "/api/v1/carousel/viewport",
            content='{"width": NaN}',
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 422


class TestFilterAndAudit:

    def test_filter(self, client):
        body = client.put("/api/v1/entities/filter", json={
            "query": "entity",
            "selected_ids": ["e1", "e2", "e4"],
            "hidden_tiers": ["Secondary"],
        }).json()
        assert body["visible"] == ["e2"]
        assert list(body["groups"]) == ["Primary", "Secondary", "Tertiary"]

        matrix = client.get("/api/v1/matrix").json()
        assert [r["entity_id"] for r in matrix["rows"]] == ["e2"]

    def test_audit(self, client):
        client.post("/api/v1/nodes/act1/toggle")
        client.post("/api/v1/nodes/ghost/toggle")

        report = client.get("/api/v1/audit", params={"layer": "expansion"}).json()
        assert [e["action"] for e in report["entries"]] == ["toggle", "toggle_ignored"]
        assert report["by_event_type"]["no_op"] == 1
        assert "layout_recompute_ms" in report["metrics"]

    def test_mutating_requests_audited(self, client):
        client.post("/api/v1/nodes/act1/toggle")
        client.get("/api/v1/layout")
        client.post("/api/v1/carousel/scroll", json={"pane": "minimap", "offset": 1})
        client.put("/api/v1/entities/filter", json={"query": "entity"})

        report = client.get("/api/v1/audit", params={"layer": "api"}).json()
        entries = report["entries"]
        assert [e["action"] for e in entries] == [
            "POST /api/v1/nodes/act1/toggle",
            "POST /api/v1/carousel/scroll",
            "PUT /api/v1/entities/filter",
        ]
        assert [e["metadata"]["status"] for e in entries] == ["200", "404", "200"]
        assert report["by_layer"]["api"] == 3

    def test_matrix_audited_under_presence(self, client):
        client.get("/api/v1/matrix")
        entries = client.get("/api/v1/audit", params={"layer": "presence"}).json()["entries"]
        assert entries
        assert entries[-1]["event_type"] == "presence"
        assert entries[-1]["action"] == "compute"


class TestAppFactory:

    def test_sample_fallback(self, monkeypatch):
        monkeypatch.delenv("SCREENTIME_MANUSCRIPT", raising=False)
        monkeypatch.delenv("SCREENTIME_ENTITY_KIND", raising=False)
        with TestClient(create_app()) as client:
            body = client.get("/health").json()
        assert body["columns"] == 3
        assert body["entities"] == 9

    def test_manuscript_from_environment(self, monkeypatch, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({
            "nodes": [
                {"id": "a", "type": "act", "childIds": ["s1", "s2"], "data": {"title": "Act"}},
                {"id": "s1", "type": "scene", "parentId": "a", "data": {"povCharacterId": "kit"}},
                {"id": "s2", "type": "scene", "parentId": "a", "data": {"characters": ["kit"]}},
            ],
            "entities": [
                {"id": "kit", "name": "Kit", "tier": "Primary"},
                {"id": "dock", "name": "Dock", "kind": "location"},
            ],
        }), encoding="utf-8")
        monkeypatch.setenv("SCREENTIME_MANUSCRIPT", str(path))
        monkeypatch.setenv("SCREENTIME_ENTITY_KIND", "character")

        with TestClient(create_app()) as client:
            client.post("/api/v1/nodes/a/toggle")
            matrix = client.get("/api/v1/matrix").json()

        assert matrix["node_ids"] == ["s1", "s2"]
        assert [c["percentage"] for c in matrix["rows"][0]["cells"]] == [85, 55]

    def test_load_visualization_kind(self):
        viz = load_visualization(kind=EntityKind.OBJECT, config=VisualizationConfig())
        assert {e.entity_id for e in viz.registry} == {"obj-lens", "obj-seal", "obj-ledger"}
