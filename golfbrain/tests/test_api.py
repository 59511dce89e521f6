from __future__ import annotations

from fastapi.testclient import TestClient

from golfbrain.app import app
from golfbrain.config import reset_settings_cache
from golfbrain.tracker import get_golf_tracker_service


def _start(client, course_id: str = "demo-links") -> dict:
    response = client.post("/api/round/start", json={"courseId": course_id})
    assert response.status_code == 201
    return response.json()


def test_health_reports_store_backend(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["env"]["store_backend"] == "memory"
    assert body["env"]["require_api_key"] is False


def test_list_courses_includes_demo_courses(client) -> None:
    response = client.get("/api/courses")

    assert response.status_code == 200
    ids = [course["id"] for course in response.json()]
    assert {"demo-links", "demo-parkland"} <= set(ids)


def test_create_course_parses_free_form_numbers(client) -> None:
    response = client.post(
        "/api/courses",
        json={"name": "Nine", "pars": "4 4 x 3", "strokeIndices": [2, 2, 1]},
    )

    assert response.status_code == 201
    course = response.json()
    assert [h["par"] for h in course["holes"]] == [4, 4, 3]
    assert len({h["strokeIndex"] for h in course["holes"]}) == 3
    assert "createdAt" in course


def test_create_course_with_blank_name_is_rejected(client) -> None:
    response = client.post("/api/courses", json={"name": "  ", "pars": "4 4"})

    assert response.status_code == 400


def test_unknown_course_is_404(client) -> None:
    assert client.get("/api/courses/nowhere").status_code == 404
    assert client.post(
        "/api/round/start", json={"courseId": "nowhere"}
    ).status_code == 404


def test_delete_course_reports_outcome(client) -> None:
    course = client.post("/api/courses", json={"name": "Temp"}).json()

    assert client.delete(f"/api/courses/{course['id']}").json() == {"deleted": True}
    assert client.delete(f"/api/courses/{course['id']}").json() == {"deleted": False}


def test_round_flow_over_http(client) -> None:
    round_ = _start(client)
    assert round_["courseId"] == "demo-links"
    assert round_["isComplete"] is False

    hole = client.get("/api/round/hole").json()
    assert hole["hole"]["number"] == 1
    assert hole["missingOutcomes"] == []

    snapshot = client.post("/api/round/holes/1/complete").json()
    assert snapshot["currentHole"] == 2
    assert snapshot["currentRound"]["totalScore"] == 4

    saved = client.get("/api/round/holes/1").json()
    assert saved["holeNumber"] == 1
    assert len(saved["strokes"]) == 2

    reviewed = client.post("/api/round/review")
    assert reviewed.status_code == 200
    assert client.get("/api/round/summary").json()["holesPlayed"] == 2

    final = client.post("/api/round/finalize").json()
    assert final["isComplete"] is True

    history = client.get("/api/rounds").json()
    assert [r["id"] for r in history] == [round_["id"]]
    assert client.get("/api/round").json()["state"] == "no_active_round"


def test_incomplete_hole_returns_missing_shot_ids(client) -> None:
    _start(client)
    added = client.post("/api/round/shots/stroke", json={"club": "7-Iron"}).json()
    shot_id = added["appended"]["id"]
    assert added["appended"]["club"] == "7-Iron"

    response = client.post("/api/round/holes/1/complete")

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["holeNumber"] == 1
    assert detail["missingShotIds"] == [shot_id]


def test_outcome_and_lie_endpoints(client) -> None:
    _start(client)
    strokes = client.get("/api/round/hole").json()["strokes"]

    response = client.post(
        f"/api/round/shots/{strokes[0]['id']}/outcome",
        json={"outcome": "left", "poor": True},
    )
    assert response.status_code == 400

    response = client.post(
        f"/api/round/shots/{strokes[0]['id']}/outcome",
        json={"outcome": "left", "poor": True, "addAnother": False},
    )
    assert response.status_code == 200
    assert response.json()["strokes"][0]["poorShotFlag"] is True

    response = client.post(
        f"/api/round/shots/{strokes[0]['id']}/lie",
        json={"lie": "water", "addAnother": False},
    )
    buffer = response.json()
    assert buffer["strokes"][1]["outcomeDirection"] == "penalty"
    assert buffer["cursor"] == 2

    response = client.post("/api/round/shots/ghost/club", json={"club": "PW"})
    assert response.status_code == 404


def test_conflicting_transitions_are_409(client) -> None:
    assert client.post("/api/round/review").status_code == 409
    _start(client)
    again = client.post("/api/round/start", json={"courseId": "demo-links"})
    assert again.status_code == 409
    assert client.post("/api/round/finalize").status_code == 409


def test_edit_past_round_while_playing_is_409(client) -> None:
    past = _start(client)
    client.post("/api/round/review")
    client.post("/api/round/finalize")
    _start(client, "demo-parkland")

    response = client.post(f"/api/rounds/{past['id']}/edit")

    assert response.status_code == 409


def test_unknown_round_lookups(client) -> None:
    assert client.get("/api/rounds/ghost").status_code == 404
    assert client.delete("/api/rounds/ghost").json() == {"deleted": False}
    assert client.get("/api/round/hole").status_code == 404
    assert client.get("/api/round/holes/3").status_code == 404


def test_settings_handicap_is_coerced(client) -> None:
    clamped = client.put("/api/settings/handicap", json={"handicap": 80})
    assert clamped.json()["handicap"] == 54
    cleared = client.put("/api/settings/handicap", json={"handicap": "n/a"})
    assert cleared.json()["handicap"] is None

    settings = client.get("/api/settings").json()
    assert "defaultClubsByPar" in settings
    assert settings["handicap"] is None


def test_reset_restores_demo_courses(client) -> None:
    client.post("/api/courses", json={"name": "Extra"})
    _start(client)

    snapshot = client.post("/api/settings/reset").json()

    assert snapshot["state"] == "no_active_round"
    assert len(client.get("/api/courses").json()) == 2


def test_metrics_endpoint_exposes_counters(client) -> None:
    _start(client)
    client.post("/api/round/holes/1/complete")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "holes_completed_total" in response.text
    assert 'path="/api/round/holes/{hole_number}/complete"' in response.text


def test_api_key_required_when_enabled(monkeypatch, service) -> None:
    monkeypatch.setenv("REQUIRE_API_KEY", "1")
    monkeypatch.setenv("API_KEYS", "alpha, beta")
    reset_settings_cache()
    app.dependency_overrides[get_golf_tracker_service] = lambda: service
    try:
        client = TestClient(app)
        assert client.get("/api/courses").status_code == 401
        denied = client.get("/api/courses", headers={"x-api-key": "nope"})
        assert denied.status_code == 401
        allowed = client.get("/api/courses", headers={"x-api-key": "beta"})
        assert allowed.status_code == 200
        assert client.get("/api/courses", params={"apiKey": "alpha"}).status_code == 200
    finally:
        app.dependency_overrides.pop(get_golf_tracker_service, None)
