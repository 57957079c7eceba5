"""HTTP tests for footprint, insights and leaderboard routes."""

import pytest

USER = {"X-User-Id": "api-user"}


def test_calculate_and_list_records(client):
    resp = client.post("/v1/footprint/calculate", headers=USER, json={"diet": "meat", "transport": "bike"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["emission"] == pytest.approx(3.3)
    assert body["persisted"] is True
    assert body["record"]["user_id"] == "api-user"
    assert body["equivalents"]["trees_to_offset_per_year"] == 58

    records = client.get("/v1/footprint/records", headers=USER).json()
    assert records["count"] == 1
    assert records["records"][0]["calculation_inputs"]["diet"] == "meat"


def test_calculate_requires_identity(client):
    resp = client.post("/v1/footprint/calculate", json={})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_unknown_choice_is_a_validation_error(client):
    resp = client.post("/v1/footprint/calculate", headers=USER, json={"diet": "carnivore"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"]["code"] == "validation_error"
    assert body["error"]["message"].startswith("diet")


def test_summary_route(client):
    client.post("/v1/footprint/calculate", headers=USER, json={})
    body = client.get("/v1/footprint/summary", headers=USER).json()
    assert body["record_count"] == 1
    assert body["average_emission"] == 2.0


def test_insights_flow(client):
    client.post("/v1/footprint/calculate", headers=USER, json={"diet": "meat", "air_travel": "frequently"})

    report = client.post("/v1/insights/generate", headers=USER).json()
    assert report["trend"]["direction"] == "insufficient_data"
    goal_ids = [g["id"] for g in report["goals"]]
    assert "reduce-transport-emissions" in goal_ids

    accepted = client.post("/v1/insights/goals/reduce-transport-emissions/accept", headers=USER)
    assert accepted.status_code == 200
    assert accepted.json()["kind"] == "goal"

    insights = client.get("/v1/insights", headers=USER).json()["insights"]
    # A Monday run adds one more tip
    assert len(insights) >= 2
    assert insights[-1]["title"] == "New Goal Accepted"

    read = client.post(f"/v1/insights/{insights[0]['id']}/read", headers=USER)
    assert read.json()["read"] is True
    unread = client.get("/v1/insights", headers=USER, params={"unread_only": True}).json()["insights"]
    assert len(unread) == len(insights) - 1


def test_unknown_goal_is_404(client):
    resp = client.post("/v1/insights/goals/nope/accept", headers=USER)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_trend_route(client):
    body = client.get("/v1/insights/trend", headers=USER).json()
    assert body["direction"] == "insufficient_data"


def test_leaderboard_route(client):
    client.post("/v1/footprint/calculate", headers={"X-User-Id": "green"}, json={"diet": "vegan"})
    client.post("/v1/footprint/calculate", headers={"X-User-Id": "grey"}, json={"diet": "meat"})
    client.put("/v1/profile/me", headers={"X-User-Id": "green"}, json={"username": "Greta", "city": "Stockholm"})

    body = client.get("/v1/leaderboard").json()
    assert [e["user_id"] for e in body["entries"]] == ["green", "grey"]
    assert body["entries"][0]["username"] == "Greta"
    assert body["entries"][0]["level"] == "Good"
    assert body["entries"][1]["username"] == "Unknown"
    assert body["stats"]["participants"] == 2


def test_overflowing_number_counts_as_zero_and_leaderboard_survives(client):
    resp = client.post(
        "/v1/footprint/calculate",
        headers={**USER, "content-type": "application/json"},
        content='{"screen_hours": 1e400}',
    )
    assert resp.status_code == 200
    assert resp.json()["emission"] == 2.0

    board = client.get("/v1/leaderboard", headers={"X-User-Id": "someone-else"})
    assert board.status_code == 200
    assert board.json()["entries"][0]["avg_emission"] == 2.0


def test_oversized_number_is_a_validation_error(client):
    resp = client.post("/v1/footprint/calculate", headers=USER, json={"screen_hours": 1e300})
    assert resp.status_code == 422
    assert resp.json()["error"]["message"].startswith("screen_hours")
    assert client.get("/v1/footprint/records", headers=USER).json()["count"] == 0
