"""
Integration tests for API routes.

Each test runs against a fresh analyzer registry injected through FastAPI's
dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from formcheck.main import app
from formcheck.registry import AnalyzerRegistry, get_registry

from helpers import FULL_SQUAT, build_frame, squat_points

API = "/api"


def frame_payload(frame, with_timestamp=True):
    payload = {
        "landmarks": [
            None if lm is None else {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
            for lm in frame.landmarks
        ]
    }
    if with_timestamp:
        payload["timestamp_ms"] = frame.timestamp_ms
    return payload


@pytest.fixture
def registry():
    return AnalyzerRegistry(max_analyzers=2)


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def analyzer_id(client):
    response = client.post(f"{API}/analyzers")
    assert response.status_code == 201
    return response.json()["analyzer_id"]


def start(client, analyzer_id, exercise_id="squat"):
    return client.put(f"{API}/analyzers/{analyzer_id}/session", json={"exercise_id": exercise_id})


class TestMeta:
    """Test suite for health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/docs"


class TestExerciseRoutes:
    """Test suite for the exercise catalog routes."""

    def test_list(self, client):
        data = client.get(f"{API}/exercises").json()
        assert data["total"] == 10
        ids = {item["id"] for item in data["items"]}
        assert {"squat", "plank"} <= ids

    def test_detail(self, client):
        data = client.get(f"{API}/exercises/squat").json()
        assert data["counts_reps"] is True
        assert data["contracted_threshold"] == 100.0
        assert data["debounce_ms"] == 500.0

    def test_hold_detail(self, client):
        data = client.get(f"{API}/exercises/plank").json()
        assert data["counts_reps"] is False
        assert data["extended_threshold"] is None

    def test_unknown(self, client):
        response = client.get(f"{API}/exercises/burpee")
        assert response.status_code == 404
        assert "burpee" in response.json()["detail"]


class TestAnalyzerRoutes:
    """Test suite for analyzer lifecycle and frame processing."""

    def test_new_analyzer_is_idle(self, client, analyzer_id):
        data = client.get(f"{API}/analyzers/{analyzer_id}/session").json()
        assert data["active"] is False
        assert data["rep_count"] == 0

    def test_registry_limit(self, client, registry):
        client.post(f"{API}/analyzers")
        client.post(f"{API}/analyzers")
        response = client.post(f"{API}/analyzers")
        assert response.status_code == 503
        assert len(registry) == 2

    def test_unknown_analyzer(self, client):
        assert client.get(f"{API}/analyzers/nope/session").status_code == 404
        assert client.delete(f"{API}/analyzers/nope").status_code == 404

    def test_delete_analyzer(self, client, analyzer_id):
        assert client.delete(f"{API}/analyzers/{analyzer_id}").status_code == 204
        assert client.get(f"{API}/analyzers/{analyzer_id}/feedback").status_code == 404

    def test_start_session(self, client, analyzer_id):
        response = start(client, analyzer_id)
        assert response.status_code == 200
        data = response.json()
        assert data["active"] is True
        assert data["exercise_id"] == "squat"
        assert data["phase"] == "extended"

    def test_start_unknown_exercise(self, client, analyzer_id):
        response = start(client, analyzer_id, "burpee")
        assert response.status_code == 400

    def test_frame_without_session(self, client, analyzer_id):
        frame = build_frame(squat_points(90.0))
        response = client.post(f"{API}/analyzers/{analyzer_id}/frames", json=frame_payload(frame))
        assert response.status_code == 409

    def test_frame_with_wrong_landmark_count(self, client, analyzer_id):
        start(client, analyzer_id)
        response = client.post(
            f"{API}/analyzers/{analyzer_id}/frames",
            json={"landmarks": [None] * 10, "timestamp_ms": 0},
        )
        assert response.status_code == 422

    def test_full_squat_over_http(self, client, analyzer_id):
        start(client, analyzer_id)
        for i, angle in enumerate(FULL_SQUAT):
            frame = build_frame(squat_points(angle), i * 100.0)
            response = client.post(
                f"{API}/analyzers/{analyzer_id}/frames", json=frame_payload(frame)
            )
            assert response.status_code == 200
        data = response.json()
        assert data["rep_count"] == 1
        assert data["skipped"] is False
        assert data["completed_rep"]["message"] == "Excellent depth!"
        assert data["completed_rep"]["classification"] == "success"

        feedback = client.get(f"{API}/analyzers/{analyzer_id}/feedback").json()
        assert feedback["total"] == 1
        assert feedback["capacity"] == 50
        assert feedback["items"][0]["rep_number"] == 1

    def test_frame_without_timestamp(self, client, analyzer_id):
        start(client, analyzer_id)
        frame = build_frame(squat_points(170.0))
        response = client.post(
            f"{API}/analyzers/{analyzer_id}/frames",
            json=frame_payload(frame, with_timestamp=False),
        )
        assert response.status_code == 200
        assert response.json()["timestamp_ms"] > 0

    def test_mixed_timestamp_sources_rejected(self, client, analyzer_id):
        start(client, analyzer_id)
        url = f"{API}/analyzers/{analyzer_id}/frames"
        frame = build_frame(squat_points(170.0), 100.0)

        assert client.post(url, json=frame_payload(frame)).status_code == 200
        response = client.post(url, json=frame_payload(frame, with_timestamp=False))
        assert response.status_code == 400
        assert "client" in response.json()["detail"]

        # A new session may pick the other clock
        start(client, analyzer_id)
        assert client.post(url, json=frame_payload(frame, with_timestamp=False)).status_code == 200
        assert client.post(url, json=frame_payload(frame)).status_code == 400

    def test_skipped_frame(self, client, analyzer_id):
        start(client, analyzer_id)
        response = client.post(
            f"{API}/analyzers/{analyzer_id}/frames", json=frame_payload(build_frame({}))
        )
        data = response.json()
        assert data["skipped"] is True
        assert data["live_feedback"] == []

    def test_stop_session(self, client, analyzer_id):
        start(client, analyzer_id)
        response = client.delete(f"{API}/analyzers/{analyzer_id}/session")
        assert response.status_code == 200
        assert response.json()["exercise_id"] == "squat"
        assert response.json()["classification_counts"] == {"success": 0, "warning": 0, "info": 0}

        response = client.delete(f"{API}/analyzers/{analyzer_id}/session")
        assert response.status_code == 409

    def test_clear_feedback(self, client, analyzer_id):
        start(client, analyzer_id)
        for i, angle in enumerate(FULL_SQUAT):
            frame = build_frame(squat_points(angle), i * 100.0)
            client.post(f"{API}/analyzers/{analyzer_id}/frames", json=frame_payload(frame))

        assert client.delete(f"{API}/analyzers/{analyzer_id}/feedback").status_code == 204
        assert client.get(f"{API}/analyzers/{analyzer_id}/feedback").json()["total"] == 0
        # Clearing the log leaves the rep count alone
        assert client.get(f"{API}/analyzers/{analyzer_id}/session").json()["rep_count"] == 1
