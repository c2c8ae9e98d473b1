"""REST routes against a headless engine on a virtual clock."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import db
from api import register_routes
from conftest import folder


@pytest.fixture
def client(engine, scenario_forest, tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_DIR", tmp_path)
    engine.load_forest(scenario_forest)
    app = FastAPI()
    register_routes(app, None, engine)
    with TestClient(app) as c:
        yield c


class TestTreeRoutes:
    def test_get_tree(self, client):
        data = client.get("/api/tree").json()
        assert data["visibleNodeIds"] == ["R", "A", "C", "B"]
        assert data["state"] == "idle"
        assert data["nodes"][0]["children"][0]["position"] == {"x": 60.0, "y": 0.0}

    def test_toggle_reports_pass(self, client):
        data = client.post("/api/tree/nodes/A/toggle").json()
        assert data["expanded"] is False
        assert data["pass"]["kind"] == "LOCAL_FANOUT"

    def test_unknown_node_is_404(self, client):
        res = client.post("/api/tree/nodes/nope/toggle")
        assert res.status_code == 404
        assert "nope" in res.json()["error"]

    def test_add_and_remove_root(self, client):
        res = client.post("/api/tree/roots", json={"path": "/D", "name": "D"})
        assert res.status_code == 200
        assert res.json()["roots"] == ["R", "_D"]
        assert res.json()["pass"]["kind"] == "FULL_RELAYOUT"
        assert client.delete("/api/tree/roots/_D").json()["roots"] == ["R"]

    def test_duplicate_root_is_400(self, client):
        res = client.post("/api/tree/roots", json={"id": "R", "path": "/R"})
        assert res.status_code == 400

    def test_children_and_attributes(self, client):
        res = client.post("/api/tree/nodes/B/children", json={"children": [folder("B1")]})
        assert res.json()["children"] == ["B1"]
        res = client.post("/api/tree/nodes/B/attributes", json={"name": "color", "value": "#abcdef"})
        assert res.json()["node"]["color"] == "#abcdef"
        assert res.json()["pass"]["kind"] == "NO_OP"
        assert client.post("/api/tree/nodes/B/attributes", json={"name": "children", "value": []}).status_code == 400

    def test_search_auto_expands(self, client):
        client.post("/api/tree/collapse-all")
        data = client.post("/api/tree/search", json={"query": "c"}).json()
        assert data["matches"] == ["C"]
        assert data["expanded"] == ["A"]
        assert data["pass"]["kind"] == "LOCAL_FANOUT"

    def test_relayout_runs_initial_pass(self, client):
        assert client.post("/api/tree/relayout").json()["pass"]["kind"] == "INITIAL"


class TestInteractionRoutes:
    def test_drag_round_trip(self, client, engine, scheduler):
        assert client.post("/api/interaction/drag/begin", json={"nodeId": "B"}).json()["state"] == "dragging"
        client.post("/api/interaction/drag/update", json={"nodeId": "B", "position": {"x": 200, "y": 200}})
        assert client.post("/api/interaction/drag/end").json()["state"] == "settling"

        # tree changes during settle are deferred
        assert client.post("/api/tree/nodes/A/toggle").json()["pass"] is None
        scheduler.advance(1.0)
        assert client.get("/api/interaction/state").json()["state"] == "idle"
        assert "B" in engine.manual

    def test_viewport_and_area(self, client, scheduler):
        assert client.post("/api/interaction/viewport", json={"x": 1, "y": 2, "zoom": 0.5}).status_code == 200
        scheduler.advance(1.0)
        assert client.get("/api/interaction/state").json()["viewport"] == {"pan": {"x": 1.0, "y": 2.0}, "zoom": 0.5}
        data = client.post("/api/interaction/area", json={"nodeId": "A"}).json()
        assert data["nodeIds"] == ["A", "C"]
        assert data["area"]["position"] == {"x": 40.0, "y": -20.0}

    def test_zero_zoom_rejected(self, client):
        assert client.post("/api/interaction/viewport", json={"x": 0, "y": 0, "zoom": 0}).status_code == 422


class TestLayoutAndSettingsRoutes:
    def test_save_and_restore_layout(self, client):
        layout_id = client.post("/api/layouts", json={"name": "snap"}).json()["layout"]["id"]
        assert [l["id"] for l in client.get("/api/layouts").json()["layouts"]] == [layout_id]

        client.post("/api/tree/roots", json={"path": "/D"})
        data = client.post(f"/api/layouts/{layout_id}/restore").json()
        assert data["pass"]["kind"] == "NO_OP"
        assert client.get("/api/tree").json()["visibleNodeIds"] == ["R", "A", "C", "B"]

        assert client.delete(f"/api/layouts/{layout_id}").json() == {"success": True}
        assert client.get(f"/api/layouts/{layout_id}").status_code == 404

    def test_settings_apply_to_engine(self, client, engine):
        res = client.post("/api/settings", json={"layout": {"direction": "TB", "rankSpacing": 75}})
        assert res.status_code == 200
        assert engine.config.direction == "TB"
        assert engine.reconciler.config.rank_sep == 75
        assert client.get("/api/settings").json()["layout"]["rankSpacing"] == 75

    def test_invalid_settings_rejected(self, client):
        assert client.post("/api/settings", json={"layout": {"stackRatio": 2}}).status_code == 400
