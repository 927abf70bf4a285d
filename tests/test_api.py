"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from api import routes
from api.schemas import DrawingSchema
from config import settings
from core.services import ExerciseStore
from main import app

from factories import diagonal_attempt, diagonal_example, letter_t, make_drawing, make_stroke


def _payload(drawing):
    return DrawingSchema.from_domain(drawing).model_dump()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def fresh_store(monkeypatch):
    store = ExerciseStore(max_attempts=5)
    monkeypatch.setattr(routes, "store", store)
    return store


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/api/health"


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "1.0.0"}


class TestScoreEndpoint:

    def test_scores_close_copy(self, client):
        response = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [_payload(diagonal_attempt())],
            "seed": 7,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["result"]["total_score"] > 70
        assert body["result"]["band"] in {"excellent", "very_good"}
        assert 1 <= body["result"]["categories"]["overall"] <= 5
        assert body["breakdown"]["constraint_adherence"] == 1.0

    def test_same_seed_same_feedback(self, client):
        request = {
            "example": _payload(letter_t()),
            "attempts": [_payload(letter_t(offset_x=20))],
            "seed": 42,
        }

        first = client.post("/api/score", json=request).json()
        second = client.post("/api/score", json=request).json()

        assert first["result"]["feedback"] == second["result"]["feedback"]
        assert first["result"]["total_score"] == second["result"]["total_score"]

    def test_constraint_boxes_by_position(self, client):
        response = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [_payload(diagonal_attempt()), _payload(diagonal_attempt())],
            "constraint_boxes": [None, {"width": 10, "height": 10}],
        })

        assert response.status_code == 200
        assert response.json()["breakdown"]["constraint_adherence"] == 0.0

    def test_no_attempts(self, client):
        response = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [],
        })

        assert response.status_code == 422
        assert response.json()["detail"] == "No attempts provided for scoring"

    def test_invalid_drawing(self, client):
        example = _payload(diagonal_example())
        example["strokes"][0]["end_time"] = -5

        response = client.post("/api/score", json={
            "example": example,
            "attempts": [_payload(diagonal_attempt())],
        })

        assert response.status_code == 422

    def test_strokes_need_a_surface(self, client):
        example = _payload(diagonal_example())
        example["width"] = 0

        response = client.post("/api/score", json={
            "example": example,
            "attempts": [_payload(diagonal_attempt())],
        })

        assert response.status_code == 422


class TestConstraintBoxEndpoint:

    def test_shrinks_with_attempts(self, client):
        first = client.get("/api/constraint-box/1").json()
        fifth = client.get("/api/constraint-box/5").json()

        assert first == {"width": 300.0, "height": 300.0}
        assert fifth["width"] == pytest.approx(120.0)

    def test_attempt_number_starts_at_one(self, client):
        assert client.get("/api/constraint-box/0").status_code == 422


class TestExercises:

    @pytest.fixture
    def exercise_id(self, client):
        response = client.post("/api/exercises", json={
            "name": "Letter T",
            "example": _payload(letter_t()),
        })
        assert response.status_code == 201
        return response.json()["id"]

    def _attempt(self, client, exercise_id, drawing=None):
        return client.post(
            f"/api/exercises/{exercise_id}/attempts",
            json={"attempt": _payload(drawing or letter_t(offset_x=10))},
        )

    def test_create_and_get(self, client, exercise_id):
        body = client.get(f"/api/exercises/{exercise_id}").json()

        assert body["name"] == "Letter T"
        assert body["attempt_count"] == 0
        assert body["attempts"] == []
        assert body["best_score"] is None
        assert len(body["example"]["strokes"]) == 2

    def test_list(self, client, exercise_id):
        listing = client.get("/api/exercises").json()

        assert [e["id"] for e in listing] == [exercise_id]
        assert "example" not in listing[0]

    def test_example_needs_strokes(self, client):
        response = client.post("/api/exercises", json={
            "name": "Nothing",
            "example": {"strokes": [], "width": 300, "height": 300},
        })

        assert response.status_code == 422

    def test_name_is_required(self, client):
        response = client.post("/api/exercises", json={
            "name": "",
            "example": _payload(letter_t()),
        })

        assert response.status_code == 422

    def test_unknown_exercise(self, client):
        assert client.get("/api/exercises/missing").status_code == 404
        assert client.delete("/api/exercises/missing").status_code == 404
        assert self._attempt(client, "missing").status_code == 404
        assert client.post("/api/exercises/missing/score").status_code == 404

    def test_record_attempts(self, client, exercise_id):
        first = self._attempt(client, exercise_id)

        assert first.status_code == 201
        assert first.json()["attempt_number"] == 1
        assert first.json()["attempts_remaining"] == 4
        assert first.json()["next_constraint_box"]["width"] == pytest.approx(255.0)

        for _ in range(4):
            last = self._attempt(client, exercise_id)

        assert last.json()["attempts_remaining"] == 0
        assert last.json()["next_constraint_box"] is None
        assert self._attempt(client, exercise_id).status_code == 409

    def test_score_without_attempts(self, client, exercise_id):
        response = client.post(f"/api/exercises/{exercise_id}/score")

        assert response.status_code == 422

    def test_best_score_is_kept(self, client, exercise_id):
        self._attempt(client, exercise_id, letter_t())
        best = client.post(f"/api/exercises/{exercise_id}/score", json={"seed": 1}).json()

        assert best["is_best_score"] is True
        assert best["best_score"]["total_score"] == best["result"]["total_score"]

        # A worse second attempt does not replace the best
        self._attempt(client, exercise_id, diagonal_attempt())
        worse = client.post(f"/api/exercises/{exercise_id}/score", json={"seed": 1}).json()

        assert worse["result"]["total_score"] < best["result"]["total_score"]
        assert worse["is_best_score"] is False
        assert worse["best_score"]["total_score"] == best["result"]["total_score"]

        summary = client.get(f"/api/exercises/{exercise_id}").json()
        assert summary["best_score"]["total_score"] == best["result"]["total_score"]

    def test_delete(self, client, exercise_id):
        assert client.delete(f"/api/exercises/{exercise_id}").status_code == 204
        assert client.get(f"/api/exercises/{exercise_id}").status_code == 404

    def test_replay_timeline(self, client, exercise_id):
        response = client.get(f"/api/exercises/{exercise_id}/replay", params={"frame_ms": 20})

        assert response.status_code == 200
        body = response.json()
        kinds = [e["kind"] for e in body["events"]]
        assert kinds[0] == "stroke_started"
        assert kinds[-1] == "finished"
        assert kinds.count("point_added") == 4
        assert body["duration_ms"] == 280

    def test_replay_unknown_exercise(self, client):
        assert client.get("/api/exercises/missing/replay").status_code == 404

    def test_new_round_after_full_attempts(self, client, exercise_id):
        for _ in range(5):
            self._attempt(client, exercise_id, letter_t())
        client.post(f"/api/exercises/{exercise_id}/score", json={"seed": 1})

        assert client.delete(f"/api/exercises/{exercise_id}/attempts").status_code == 204

        body = client.get(f"/api/exercises/{exercise_id}").json()
        assert body["attempt_count"] == 0
        assert body["best_score"] is not None
        assert self._attempt(client, exercise_id).json()["attempt_number"] == 1

    def test_new_round_unknown_exercise(self, client):
        assert client.delete("/api/exercises/missing/attempts").status_code == 404


class TestRequestLimits:

    def test_too_many_attempts(self, client):
        response = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [_payload(diagonal_attempt())] * (settings.max_attempts + 1),
        })

        assert response.status_code == 422

    def test_too_many_constraint_boxes(self, client):
        response = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [_payload(diagonal_attempt())],
            "constraint_boxes": [None] * (settings.max_attempts + 1),
        })

        assert response.status_code == 422

    def test_drawing_point_limit(self, client, monkeypatch):
        big = _payload(make_drawing([make_stroke(0, [(i, i) for i in range(6)])]))
        monkeypatch.setattr(settings, "max_points_per_drawing", 5)

        rejected = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [big],
        })
        accepted = client.post("/api/score", json={
            "example": _payload(diagonal_example()),
            "attempts": [_payload(diagonal_attempt())],
        })

        assert rejected.status_code == 422
        assert "limit is 5" in rejected.text
        assert accepted.status_code == 200
