"""Tests for the HTTP surface: state, map, config, control and placement."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lanedefense.api.app import create_app
from lanedefense.api.dependencies import set_engine_manager
from lanedefense.api.routes.map import rle_encode
from lanedefense.config import SimulationConfig


@pytest.fixture
def client():
    app = create_app(SimulationConfig(), autostart=False)
    with TestClient(app) as c:
        yield c


def _place(client, kind="rocket_tower", col=5, row=3):
    return client.post("/api/v1/defenders", json={"kind": kind, "col": col, "row": row})


class TestRLE:
    def test_runs(self):
        assert rle_encode([True, True, False, True]) == [1, 2, 0, 1, 1, 1]

    def test_empty(self):
        assert rle_encode([]) == []


class TestReadEndpoints:
    def test_state_before_first_tick(self, client):
        body = client.get("/api/v1/state").json()
        assert body["tick"] == 0
        assert body["gold"] == 1000
        assert body["wave"]["level"] == 1
        assert body["entities"] == []

    def test_map_covers_grid(self, client):
        body = client.get("/api/v1/map").json()
        assert (body["width"], body["height"]) == (25, 6)
        assert body["battle_start_row"] == 2
        counts = body["grid"][1::2]
        assert sum(counts) == 25 * 6
        # Rows 0-1 are the boundary strip, so the grid opens with a blocked run
        assert body["grid"][:2] == [0, 2 * 25]

    def test_config(self, client):
        body = client.get("/api/v1/config").json()
        assert body["grid_width"] == 25
        assert body["battlefield_width"] == 2000
        kinds = {a["kind"]: a for a in body["archetypes"]}
        assert kinds["rocket_tower"]["cost"] == 120
        assert kinds["tank"]["reward"] == 20

    def test_stats(self, client):
        body = client.get("/api/v1/stats").json()
        assert body["running"] is False
        assert body["defenders"] == 0


class TestDefenders:
    def test_place_then_conflict(self, client):
        resp = _place(client)
        assert resp.status_code == 201
        assert resp.json()["gold"] == 880
        assert isinstance(resp.json()["id"], int)

        again = _place(client, kind="laser_tower")
        assert again.status_code == 409

    def test_place_blocks_map_cell(self, client):
        _place(client, col=0, row=2)
        grid = client.get("/api/v1/map").json()["grid"]
        # 50 boundary cells plus the new defender
        assert grid[:2] == [0, 51]

    def test_unknown_and_attacker_kinds_rejected(self, client):
        assert _place(client, kind="catapult").status_code == 422
        assert _place(client, kind="tank").status_code == 422

    def test_negative_cell_rejected(self, client):
        assert _place(client, col=-1).status_code == 422

    def test_upgrade_and_sell(self, client):
        defender_id = _place(client).json()["id"]

        up = client.post(f"/api/v1/defenders/{defender_id}/upgrade")
        assert up.status_code == 200
        assert up.json()["gold"] == 1000 - 120 - 70

        sold = client.delete(f"/api/v1/defenders/{defender_id}")
        assert sold.status_code == 200
        assert sold.json()["gold"] == 1000 - 120 - 70 + 2 * 60

        assert client.delete(f"/api/v1/defenders/{defender_id}").status_code == 404
        assert client.post(f"/api/v1/defenders/{defender_id}/upgrade").status_code == 409


class TestControl:
    def test_step_advances_and_flushes_placement(self, client):
        _place(client)
        resp = client.post("/api/v1/control/step").json()
        assert resp["tick"] == 1

        events = client.get("/api/v1/events").json()
        assert [e["category"] for e in events] == ["placed"]

        state = client.get("/api/v1/state", params={"since_tick": 1}).json()
        assert state["tick"] == 1
        assert state["entities"][0]["kind"] == "rocket_tower"
        assert state["entities"][0]["hp_ratio"] == pytest.approx(1.0)

    def test_step_count_while_stopped(self, client):
        resp = client.post("/api/v1/control/step", params={"count": 5}).json()
        assert resp["tick"] == 5
        assert resp["running"] is False

    def test_events_filtered_by_category(self, client):
        _place(client)
        client.post("/api/v1/control/step", params={"count": 60})
        spawned = client.get("/api/v1/events", params={"category": "spawned"}).json()
        assert len(spawned) == 1
        both = client.get("/api/v1/events", params=[("category", "spawned"), ("category", "placed")]).json()
        assert {e["category"] for e in both} == {"spawned", "placed"}

    def test_stats_count_events(self, client):
        _place(client)
        client.post("/api/v1/control/step")
        stats = client.get("/api/v1/stats").json()
        assert stats["event_totals"] == {"placed": 1}
        assert stats["last_tick_ms"] >= 0.0

    def test_reset_restores_gold(self, client):
        _place(client)
        client.post("/api/v1/control/step")
        resp = client.post("/api/v1/control/reset").json()
        assert resp["tick"] == 0
        assert client.get("/api/v1/state").json()["gold"] == 1000
        assert client.get("/api/v1/events").json() == []

    def test_pause_when_stopped(self, client):
        assert client.post("/api/v1/control/pause").json()["status"] == "error"

    def test_unknown_action(self, client):
        assert client.post("/api/v1/control/explode").status_code == 422

    def test_speed(self, client):
        assert client.post("/api/v1/speed", params={"tps": 10}).json()["status"] == "ok"
        assert client.get("/api/v1/config").json()["tick_rate"] == pytest.approx(0.1)


def test_requests_before_startup_get_503():
    set_engine_manager(None)
    app = create_app(SimulationConfig(), autostart=False)
    # No context manager: the lifespan never runs
    c = TestClient(app)
    assert c.get("/api/v1/state").status_code == 503
