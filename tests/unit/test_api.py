"""
Tests for the HTTP surface.

The app is built with an in-memory store and driven through
TestClient; entering the client runs the startup lifespan, which
migrates and loads everything.
"""

import json

import pytest
from fastapi.testclient import TestClient

from swimlog.infrastructure.kvstore import MockKeyValueStore
from swimlog.main import create_app


@pytest.fixture
def client():
    with TestClient(create_app(store=MockKeyValueStore())) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_ready_after_startup(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert {c["name"] for c in body["checks"]} == {"configuration", "data", "storage"}


# ---------------------------------------------------------------------------
# Entity CRUD
# ---------------------------------------------------------------------------

class TestTeamRoutes:

    def test_create_list_get_update_delete(self, client):
        created = client.post("/api/v1/teams", json={"name": "Sharks"})
        assert created.status_code == 201
        team_id = created.json()["id"]

        assert [t["name"] for t in client.get("/api/v1/teams").json()] == ["Sharks"]
        assert client.get(f"/api/v1/teams/{team_id}").json()["name"] == "Sharks"

        updated = client.patch(f"/api/v1/teams/{team_id}", json={"name": "Tiger Sharks"})
        assert updated.status_code == 200
        assert updated.json()["name"] == "Tiger Sharks"

        assert client.delete(f"/api/v1/teams/{team_id}").status_code == 204
        assert client.get(f"/api/v1/teams/{team_id}").status_code == 404

    def test_invalid_create_is_422(self, client):
        assert client.post("/api/v1/teams", json={"name": " "}).status_code == 422

    def test_invalid_update_is_422(self, client):
        team_id = client.post("/api/v1/teams", json={"name": "Sharks"}).json()["id"]
        assert client.patch(f"/api/v1/teams/{team_id}", json={"name": ""}).status_code == 422

    def test_unknown_ids_are_404(self, client):
        assert client.patch("/api/v1/teams/nope", json={"name": "X"}).status_code == 404
        assert client.delete("/api/v1/teams/nope").status_code == 404


class TestStrokeRoutes:

    def test_strokes_are_seeded(self, client):
        names = [s["name"] for s in client.get("/api/v1/strokes").json()]
        assert names == ["Freestyle", "Backstroke", "Breaststroke", "Butterfly", "Individual Medley"]


class TestSwimmerAndTimeRoutes:

    def test_best_time_lookup(self, client):
        swimmer = client.post("/api/v1/swimmers", json={"name": "Ana", "teamIds": ["t1"]}).json()
        stroke_id = client.get("/api/v1/strokes").json()[0]["id"]
        for seconds in (61.0, 59.5):
            response = client.post("/api/v1/times", json={
                "swimmerId": swimmer["id"],
                "strokeId": stroke_id,
                "distance": "100",
                "timeSeconds": seconds,
            })
            assert response.status_code == 201

        best = client.get(
            "/api/v1/times/best",
            params={"swimmerId": swimmer["id"], "strokeId": stroke_id, "distance": "100"},
        )
        assert best.status_code == 200
        assert best.json()["timeSeconds"] == 59.5

        missing = client.get(
            "/api/v1/times/best",
            params={"swimmerId": swimmer["id"], "strokeId": stroke_id, "distance": "200"},
        )
        assert missing.status_code == 404

        assert len(client.get(f"/api/v1/times/by-swimmer/{swimmer['id']}").json()) == 2
        assert client.get("/api/v1/swimmers/by-team/t1").json()[0]["id"] == swimmer["id"]
        assert client.get("/api/v1/swimmers/by-name/ANA").json()["id"] == swimmer["id"]

    def test_clear_times(self, client):
        assert client.delete("/api/v1/times").status_code == 204
        assert client.get("/api/v1/times").json() == []

    def test_invalid_time_is_422(self, client):
        response = client.post("/api/v1/times", json={"swimmerId": "s1", "strokeId": "k1", "distance": 100, "timeSeconds": 60})
        assert response.status_code == 422


class TestTrainingRoutes:

    def test_exercise_lifecycle(self, client):
        training_id = client.post("/api/v1/trainings", json={"name": "Monday"}).json()["id"]

        added = client.post(f"/api/v1/trainings/{training_id}/exercises", json={"id": "e1", "description": "warmup"})
        assert added.status_code == 201

        edited = client.patch(f"/api/v1/trainings/{training_id}/exercises/e1", json={"reps": 4})
        assert edited.json()["exercises"] == [{"id": "e1", "description": "warmup", "reps": 4}]

        removed = client.delete(f"/api/v1/trainings/{training_id}/exercises/e1")
        assert removed.json()["exercises"] == []

        assert client.delete(f"/api/v1/trainings/{training_id}/exercises/e1").status_code == 404


# ---------------------------------------------------------------------------
# Log and Preferences
# ---------------------------------------------------------------------------

class TestLogRoutes:

    def test_log_entry(self, client):
        response = client.post("/api/v1/log", json={
            "name": "Ana",
            "stroke": "Freestyle",
            "distance": "100",
            "effort": "90%",
            "best_time": "1:00.000",
        })

        assert response.status_code == 201
        assert response.json()["resultTime"] == "1:06.000"
        assert len(client.get("/api/v1/log").json()) == 1

    def test_rejections_are_422(self, client):
        assert client.post("/api/v1/log", json={"name": "Ana"}).status_code == 422
        response = client.post("/api/v1/log", json={
            "name": "Ana", "stroke": "Freestyle", "distance": "100", "best_time": "fast",
        })
        assert response.status_code == 422

    def test_clear_log(self, client):
        client.post("/api/v1/log", json={
            "name": "Ana", "stroke": "Freestyle", "distance": "100", "best_time": "60",
        })
        assert client.delete("/api/v1/log").status_code == 204
        assert client.get("/api/v1/log").json() == []

    def test_unit_preference(self, client):
        assert client.get("/api/v1/preferences/unit").json()["unit"] == "m"

        response = client.put("/api/v1/preferences/unit", json={"unit": "y"})
        assert response.status_code == 200
        assert response.json()["is_yards"] is True
        assert "1650" in response.json()["distances"]

        assert client.put("/api/v1/preferences/unit", json={"unit": "km"}).status_code == 422


class TestStartupMigration:

    def test_legacy_log_is_migrated_on_startup(self):
        store = MockKeyValueStore({
            "swimEntries": json.dumps([{
                "id": 1700000000000,
                "timestamp": "t1",
                "name": "Ana",
                "stroke": "freestyle",
                "distance": "100",
                "effort": "80%",
                "bestSeconds": 60.5,
                "resultSeconds": 72.6,
            }]),
        })

        with TestClient(create_app(store=store)) as client:
            swimmers = client.get("/api/v1/swimmers").json()
            times = client.get("/api/v1/times").json()

        assert [s["name"] for s in swimmers] == ["Ana"]
        assert times[0]["swimmerId"] == swimmers[0]["id"]
        assert times[0]["legacyId"] == 1700000000000
