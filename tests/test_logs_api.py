"""API tests for journal log entries."""

from datetime import datetime, timedelta

import pytest

from mediecho.models import Log

MONDAY = datetime(2024, 1, 8, 9, 0)


@pytest.fixture
def user(make_user):
    return make_user(plan="free", status="none")


class TestCreateLog:
    """Tests for POST /api/logs."""

    def test_create(self, client, db, user, auth_headers):
        response = client.post(
            "/api/logs",
            json={
                "type": "symptom",
                "text": "Dull ache in the lower back",
                "tone": "negative",
                "meta": {"intensity": 5, "tags": ["back"], "transcriptionConfidence": 0.92},
            },
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        log = response.json()["log"]
        assert log["type"] == "symptom"
        assert log["meta"] == {"intensity": 5, "tags": ["back"], "transcription_confidence": 0.92}

        stored = db.query(Log).one()
        assert stored.user_id == user.id
        assert stored.intensity == 5

    def test_minimal_log(self, client, user, auth_headers):
        response = client.post("/api/logs", json={"type": "voice", "text": "Quick note"}, headers=auth_headers(user))
        assert response.status_code == 201
        assert response.json()["log"]["tone"] is None

    @pytest.mark.parametrize(
        "body",
        [
            {"type": "sleep", "text": "Unknown type"},
            {"type": "mood", "text": ""},
            {"type": "mood", "text": "x" * 10001},
            {"type": "mood", "text": "Bad tone", "tone": "ecstatic"},
            {"type": "symptom", "text": "Too intense", "meta": {"intensity": 11}},
            {"type": "symptom", "text": "Not intense enough", "meta": {"intensity": 0}},
        ],
    )
    def test_validation(self, client, user, auth_headers, body):
        response = client.post("/api/logs", json=body, headers=auth_headers(user))
        assert response.status_code == 400
        payload = response.json()
        assert payload["success"] is False
        assert payload["message"] == "Validation failed"
        assert payload["details"]

    def test_requires_auth(self, client):
        response = client.post("/api/logs", json={"type": "mood", "text": "hi"})
        assert response.status_code == 401


class TestListLogs:
    """Tests for GET /api/logs."""

    def test_newest_first_with_pagination(self, client, user, make_log, auth_headers):
        for day in range(5):
            make_log(user, MONDAY + timedelta(days=day), "mood", f"Day {day}")

        response = client.get("/api/logs?limit=2&page=2", headers=auth_headers(user))

        body = response.json()
        assert [log["text"] for log in body["logs"]] == ["Day 2", "Day 1"]
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_filters(self, client, user, make_log, auth_headers):
        make_log(user, MONDAY, "food", "Breakfast")
        make_log(user, MONDAY + timedelta(days=1), "mood", "Fine")
        make_log(user, MONDAY + timedelta(days=3), "food", "Dinner")

        response = client.get(
            "/api/logs",
            params={"type": "food", "start": "2024-01-09T00:00:00", "end": "2024-01-12T00:00:00"},
            headers=auth_headers(user),
        )

        assert [log["text"] for log in response.json()["logs"]] == ["Dinner"]

    def test_owner_scoped(self, client, user, make_user, make_log, auth_headers):
        other = make_user()
        make_log(other, MONDAY, "food", "Not yours")

        response = client.get("/api/logs", headers=auth_headers(user))
        assert response.json()["logs"] == []
        assert response.json()["pagination"]["total"] == 0


class TestSingleLog:
    """Tests for GET/PUT/DELETE /api/logs/{id}."""

    def test_get(self, client, user, make_log, auth_headers):
        log = make_log(user, MONDAY, "fitness", "Swim")
        response = client.get(f"/api/logs/{log.id}", headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json()["log"]["text"] == "Swim"

    def test_other_users_log_is_404(self, client, user, make_user, make_log, auth_headers):
        other = make_user()
        log = make_log(other, MONDAY, "fitness", "Swim")

        assert client.get(f"/api/logs/{log.id}", headers=auth_headers(user)).status_code == 404
        assert client.delete(f"/api/logs/{log.id}", headers=auth_headers(user)).status_code == 404

    def test_update(self, client, db, user, make_log, auth_headers):
        log = make_log(user, MONDAY, "fitness", "Swim")

        response = client.put(
            f"/api/logs/{log.id}",
            json={"type": "fitness", "text": "Long swim", "tone": "positive", "meta": {"duration": 3600}},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        db.expire_all()
        updated = db.get(Log, log.id)
        assert updated.text == "Long swim"
        assert updated.meta == {"duration": 3600.0, "tags": []}

    def test_delete(self, client, db, user, make_log, auth_headers):
        log = make_log(user, MONDAY, "fitness", "Swim")

        response = client.delete(f"/api/logs/{log.id}", headers=auth_headers(user))

        assert response.status_code == 200
        assert db.query(Log).count() == 0


class TestLogStats:
    """Tests for GET /api/logs/stats/summary."""

    def test_counts_and_latest_per_type(self, client, user, make_log, auth_headers):
        make_log(user, MONDAY, "food", "Breakfast")
        make_log(user, MONDAY + timedelta(days=2), "food", "Dinner")
        make_log(user, MONDAY + timedelta(days=1), "mood", "Fine")

        response = client.get("/api/logs/stats/summary", headers=auth_headers(user))

        assert response.json()["stats"] == [
            {"type": "food", "count": 2, "latest": "2024-01-10T09:00:00"},
            {"type": "mood", "count": 1, "latest": "2024-01-09T09:00:00"},
        ]
