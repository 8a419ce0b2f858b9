"""Tests for API endpoints (no LLM calls — the oracle and store are overridden)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import StubOracle

from cutplanner.config import Settings
from cutplanner.dependencies import get_oracle, get_settings, get_store
from cutplanner.engine.layout import PIECE_COLORS
from cutplanner.history.store import HistoryStore, InMemoryBackend
from cutplanner.llm.client import LayoutServiceError
from cutplanner.main import app
from cutplanner.models.layout import OracleLayout, OraclePlacement, OracleRef


@pytest.fixture
def api_store() -> HistoryStore:
    return HistoryStore(InMemoryBackend())


@pytest.fixture
def oracle() -> StubOracle:
    return StubOracle(
        OracleLayout(
            placed_pieces=[OraclePlacement(id="p1", x=0, y=0)],
            unplaced_pieces=[OracleRef(id="p2")],
        )
    )


@pytest.fixture
def client(api_store, oracle):
    app.dependency_overrides[get_store] = lambda: api_store
    app.dependency_overrides[get_oracle] = lambda: oracle
    app.dependency_overrides[get_settings] = lambda: Settings(verify_layout=True)
    yield TestClient(app)
    app.dependency_overrides.clear()


CALC_BODY = {
    "board": {"width": "100", "height": "100"},
    "pieces": [
        {"id": "p1", "width": "20", "height": "30"},
        {"id": "p2", "width": "150", "height": "10"},
    ],
}


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_validate(client):
    assert client.post("/api/validate", json={"text": "10 1/2"}).json() == {"value": 10.5, "error": None}
    bad = client.post("/api/validate", json={"text": "1/2 1/2"}).json()
    assert bad["value"] is None
    assert bad["error"]


def test_calculate_success(client, api_store):
    response = client.post("/api/calculate", json=CALC_BODY)
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "succeeded"
    assert data["error"] is None
    placed = data["layout"]["placedPieces"]
    assert placed == [
        {"id": "p1", "width": 20.0, "height": 30.0, "x": 0.0, "y": 0.0, "color": PIECE_COLORS[0]}
    ]
    assert [p["id"] for p in data["unplacedPieces"]] == ["p2"]
    assert data["entry"]["id"] == api_store.entries[0].id


def test_calculate_rejected(client, oracle, api_store):
    body = {"board": {"width": "abc", "height": "100"}, "pieces": []}
    data = client.post("/api/calculate", json=body).json()
    assert data["state"] == "rejected"
    assert "board-width" in data["fieldErrors"]
    assert oracle.calls == []
    assert api_store.entries == []


def test_calculate_failed(client, oracle, api_store):
    oracle.error = LayoutServiceError("Layout service request failed: boom")
    data = client.post("/api/calculate", json=CALC_BODY).json()
    assert data["state"] == "failed"
    assert "boom" in data["error"]
    assert data["layout"] is None
    assert api_store.entries == []


def test_calculate_connection_error_is_failed(client, oracle, api_store):
    oracle.error = ConnectionError("connection reset")
    response = client.post("/api/calculate", json=CALC_BODY)
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "failed"
    assert "connection reset" in data["error"]
    assert api_store.entries == []


def test_history_lifecycle(client, api_store):
    client.post("/api/calculate", json=CALC_BODY)
    listing = client.get("/api/history").json()
    assert listing["count"] == 1
    item = listing["entries"][0]
    assert item["summary"] == {"placedCount": 1, "unplacedCount": 1, "wastePct": 94.0}

    entry_id = item["entry"]["id"]
    assert client.get(f"/api/history/{entry_id}").status_code == 200

    edit = client.get(f"/api/history/{entry_id}/edit").json()
    assert edit["board"] == {"width": "100", "height": "100"}
    assert edit["pieces"][1] == {"id": "p2", "width": "150", "height": "10"}

    updated = dict(item["entry"])
    updated["board"] = {"width": 200, "height": 100}
    response = client.put(f"/api/history/{entry_id}", json=updated)
    assert response.status_code == 200
    assert api_store.get(entry_id).board.width == 200

    assert client.delete(f"/api/history/{entry_id}").status_code == 204
    assert client.delete(f"/api/history/{entry_id}").status_code == 404
    assert client.get("/api/history").json()["count"] == 0


def test_history_clear(client, api_store):
    client.post("/api/calculate", json=CALC_BODY)
    client.post("/api/calculate", json=CALC_BODY)
    assert len(api_store.entries) == 2
    assert client.delete("/api/history").json()["count"] == 0
    assert api_store.entries == []


def test_history_unknown_entry(client):
    assert client.get("/api/history/nope").status_code == 404
    assert client.get("/api/history/nope/edit").status_code == 404
    assert client.get("/api/history/nope/diagram").status_code == 404


def test_diagram_render_with_selection(client):
    body = {
        "board": {"width": 100, "height": 50},
        "placedPieces": [{"id": "a", "width": 20, "height": 30, "x": 0, "y": 0, "color": "#f87171"}],
        "selectedId": "a",
    }
    data = client.post("/api/diagram", json=body).json()
    assert data["svg"].startswith("<?xml")
    assert data["selected"]["position"] == "(0.00, 0.00)"
    assert data["filename"] == "layout-plan.svg"


def test_diagram_export_download(client):
    entry_id = client.post("/api/calculate", json=CALC_BODY).json()["entry"]["id"]
    response = client.get(f"/api/history/{entry_id}/diagram")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert 'filename="layout-plan.svg"' in response.headers["content-disposition"]
    assert "20x30" in response.text
