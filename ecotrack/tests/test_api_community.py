"""HTTP tests for challenges, community, profile, notifications and export."""

USER = {"X-User-Id": "api-user"}


def test_challenge_routes(client):
    listing = client.get("/v1/challenges", headers=USER).json()["challenges"]
    assert len(listing) == 8
    assert all(c["status"] == "not_started" for c in listing)

    progress = client.post("/v1/challenges/walk-5km/progress", headers=USER, json={"progress": 3})
    assert progress.json()["progress"] == 3
    assert progress.json()["status"] == "in_progress"

    done = client.post("/v1/challenges/walk-5km/complete", headers=USER).json()
    assert done["challenge"]["status"] == "completed"
    assert done["emitted"][0]["type"] == "challenge.completed"

    again = client.post("/v1/challenges/walk-5km/complete", headers=USER).json()
    assert again["emitted"] == []

    stats = client.get("/v1/challenges/stats", headers=USER).json()
    assert stats["total_points"] == 50
    assert stats["daily_streak"] == 1

    available = client.get("/v1/challenges", headers=USER, params={"available_only": True}).json()["challenges"]
    assert "walk-5km" not in {c["id"] for c in available}

    notes = client.get("/v1/notifications", headers=USER).json()["notifications"]
    assert notes[0]["title"] == "Challenge Completed! 🎉"


def test_unknown_challenge_is_404(client):
    resp = client.post("/v1/challenges/moonwalk/complete", headers=USER)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_post_comment_and_like(client):
    created = client.post(
        "/v1/community/posts",
        headers=USER,
        json={"title": "Compost tips", "content": "Started composting kitchen leftovers this month"},
    )
    assert created.status_code == 201
    post_id = created.json()["post"]["id"]
    assert created.json()["moderation"]["action"] == "approve"

    comment = client.post(
        f"/v1/community/posts/{post_id}/comments",
        headers={"X-User-Id": "friend"},
        json={"content": "Great idea, doing the same"},
    )
    assert comment.status_code == 201

    like = client.post(f"/v1/community/posts/{post_id}/like", headers={"X-User-Id": "friend"}).json()
    assert like == {"post_id": post_id, "liked": True, "likes_count": 1}

    posts = client.get("/v1/community/posts", headers={"X-User-Id": "friend"}).json()["posts"]
    assert posts[0]["likes_count"] == 1
    assert posts[0]["liked_by_me"] is True
    assert posts[0]["comments"][0]["content"] == "Great idea, doing the same"


def test_rejected_post_returns_content_rejected(client):
    resp = client.post(
        "/v1/community/posts",
        headers=USER,
        json={"title": "Hot take", "content": "Global warming fake, science lie"},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"]["code"] == "content_rejected"
    assert body["error"]["flags"] == ["inappropriate_language"]
    assert body["error"]["request_id"] == resp.headers["x-request-id"]


def test_moderation_preview(client):
    body = client.post("/v1/community/moderate", headers=USER, json={"content": "Visit https://example.net now"}).json()
    assert body["review_required"] is True
    assert body["result"]["action"] == "review"


def test_profile_routes(client):
    me = client.get("/v1/profile/me", headers=USER).json()
    assert me["profile"]["id"] == "api-user"
    assert me["footprint"]["record_count"] == 0

    updated = client.put("/v1/profile/me", headers=USER, json={"city": "Nairobi"}).json()
    assert updated["city"] == "Nairobi"


def test_null_username_is_rejected_and_profile_survives(client):
    resp = client.put("/v1/profile/me", headers=USER, json={"username": None})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "validation_error"

    me = client.get("/v1/profile/me", headers=USER)
    assert me.status_code == 200
    assert me.json()["profile"]["username"] == "user-api-user"
    assert client.get("/v1/export/report", headers=USER).status_code == 200

    cleared = client.put("/v1/profile/me", headers=USER, json={"city": None}).json()
    assert cleared["city"] is None


def test_export_routes(client):
    client.post("/v1/footprint/calculate", headers=USER, json={"diet": "fish"})

    csv_resp = client.get("/v1/export/records", headers=USER, params={"format": "csv"})
    assert csv_resp.status_code == 200
    assert csv_resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in csv_resp.headers["content-disposition"]
    assert csv_resp.text.splitlines()[1].endswith(",2.80,api-user")

    report = client.get("/v1/export/report", headers=USER)
    assert report.headers["content-type"].startswith("text/markdown")
    assert report.text.startswith("# Carbon Footprint Report")

    bad = client.get("/v1/export/records", headers=USER, params={"format": "xml"})
    assert bad.status_code == 422
