"""
End-to-end tests of the HTTP API (TestClient, in-memory database,
fixed clock and fake mailer from conftest)
"""

import pytest
from fastapi.testclient import TestClient

from careercatalyst import main
from careercatalyst.interview_window import BUFFER_MS

T = 1_700_000_000_000

CONFIRMATION = {
    "to": "alice@example.com",
    "username": "alice",
    "interviewDate": "2026-11-02",
    "interviewTime": "10:30",
    "interviewLink": "https://meet.example.com/alice",
}


def register(client, username="alice", email="alice@example.com", password="pw123", user_type="candidate"):
    return client.post(
        "/api/register",
        json={"username": username, "email": email, "password": password, "userType": user_type},
    )


class TestHealth:

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    def test_root_describes_api_without_frontend(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == "CareerCatalyst API"
        assert "POST /api/check-interview-status" in r.json()["endpoints"]


class TestCheckInterviewStatus:

    @pytest.mark.parametrize(
        "now, status, message",
        [
            (T, "active", "Interview link is active"),
            (T - BUFFER_MS, "active", "Interview link is active"),
            (T + BUFFER_MS, "active", "Interview link is active"),
            (T - BUFFER_MS - 1, "inactive", "Interview link is not yet active"),
            (T + BUFFER_MS + 1, "expired", "Interview has expired"),
        ],
    )
    def test_status_uses_injected_clock(self, client, clock, now, status, message):
        clock.now = now

        r = client.post("/api/check-interview-status", json={"interviewTimestamp": T})

        assert r.status_code == 200
        body = r.json()
        assert body["status"] == status
        assert body["message"] == message
        assert body["windowOpensAt"] == T - BUFFER_MS
        assert body["windowClosesAt"] == T + BUFFER_MS

    def test_same_request_same_answer(self, client):
        answers = {
            client.post("/api/check-interview-status", json={"interviewTimestamp": T}).json()["status"]
            for _ in range(3)
        }
        assert answers == {"active"}

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"interviewTimestamp": None},
            {"interviewTimestamp": "1700000000000"},
            {"interviewTimestamp": True},
            {"interviewTimestamp": 1700000000000.5},
            {"interviewTimestamp": [T]},
        ],
    )
    def test_invalid_timestamp(self, client, payload):
        r = client.post("/api/check-interview-status", json=payload)

        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False
        assert body["error"] == "invalid_input"
        assert "interviewTimestamp" in body["message"]

    @pytest.mark.parametrize(
        "raw",
        [b"", b"null", b"[1700000000000]", b"1700000000000", b"\"1700000000000\""],
    )
    def test_body_that_is_not_an_object(self, client, raw):
        """No body, null, a list or a bare value: still a missing timestamp, not a 422"""
        r = client.post(
            "/api/check-interview-status",
            content=raw,
            headers={"Content-Type": "application/json"},
        )

        assert r.status_code == 400
        assert r.json() == {
            "success": False,
            "error": "invalid_input",
            "message": "interviewTimestamp is required",
        }

    def test_no_body_at_all(self, client):
        r = client.post("/api/check-interview-status")

        assert r.status_code == 400
        assert r.json()["error"] == "invalid_input"


class TestSendInterviewConfirmation:

    def test_send(self, client, mailer):
        r = client.post("/api/send-interview-confirmation", json=CONFIRMATION)

        assert r.status_code == 200
        assert r.json() == {
            "success": True,
            "message": "Email sent successfully",
            "messageId": "<msg-1@careercatalyst.test>",
        }
        assert mailer.sent == [
            {
                "to": "alice@example.com",
                "username": "alice",
                "interview_date": "2026-11-02",
                "interview_time": "10:30",
                "interview_link": "https://meet.example.com/alice",
            }
        ]

    def test_sent_confirmation_is_recorded(self, client):
        client.post("/api/send-interview-confirmation", json=CONFIRMATION)

        r = client.get("/api/interviews", params={"username": "alice"})

        assert r.status_code == 200
        items = r.json()
        assert len(items) == 1
        assert items[0]["interviewLink"] == "https://meet.example.com/alice"
        assert items[0]["messageId"] == "<msg-1@careercatalyst.test>"
        assert client.get("/api/interviews", params={"username": "bob"}).json() == []

    def test_delivery_failure(self, client, mailer):
        mailer.fail_with = "Connection refused"

        r = client.post("/api/send-interview-confirmation", json=CONFIRMATION)

        assert r.status_code == 500
        assert r.json() == {
            "success": False,
            "error": "delivery_failed",
            "message": "Failed to send email: Connection refused",
        }
        assert client.get("/api/interviews").json() == []

    def test_unexpected_error_gives_generic_500(self, client, mailer):
        mailer.crash_with = RuntimeError("template blew up")
        # same dependency overrides as `client`, but errors become responses
        lenient = TestClient(main.app, raise_server_exceptions=False)

        r = lenient.post("/api/send-interview-confirmation", json=CONFIRMATION)

        assert r.status_code == 500
        assert r.json() == {
            "success": False,
            "error": "server_error",
            "message": "Internal server error",
        }
        assert "template blew up" not in r.text
        assert client.get("/api/interviews").json() == []

    def test_missing_fields(self, client):
        r = client.post("/api/send-interview-confirmation", json={"to": "alice@example.com"})
        assert r.status_code == 422


class TestListInterviews:

    def test_limit(self, client):
        for _ in range(3):
            client.post("/api/send-interview-confirmation", json=CONFIRMATION)

        r = client.get("/api/interviews", params={"limit": 2})

        assert r.status_code == 200
        assert [item["messageId"] for item in r.json()] == [
            "<msg-3@careercatalyst.test>",
            "<msg-2@careercatalyst.test>",
        ]

    @pytest.mark.parametrize("limit", [-1, 0, 101])
    def test_limit_out_of_range(self, client, limit):
        client.post("/api/send-interview-confirmation", json=CONFIRMATION)

        r = client.get("/api/interviews", params={"limit": limit})

        assert r.status_code == 422


class TestUsers:

    def test_register(self, client):
        r = register(client)

        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["user"]["username"] == "alice"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["type"] == "candidate"
        assert "password" not in str(body)

    @pytest.mark.parametrize(
        "username, email",
        [("alice", "new@example.com"), ("newname", "alice@example.com")],
    )
    def test_register_conflict(self, client, username, email):
        register(client)

        r = register(client, username=username, email=email)

        assert r.status_code == 409
        assert r.json() == {
            "success": False,
            "error": "conflict",
            "message": "User already exists with this username or email",
        }

    def test_login(self, client):
        user_id = register(client).json()["user"]["id"]

        r = client.post("/api/login", json={"username": "alice", "password": "pw123"})

        assert r.status_code == 200
        assert r.json()["message"] == "Login successful"
        assert r.json()["user"]["id"] == user_id

    @pytest.mark.parametrize("username, password", [("alice", "wrong"), ("ghost", "pw123")])
    def test_login_failure(self, client, username, password):
        register(client)

        r = client.post("/api/login", json={"username": username, "password": password})

        assert r.status_code == 401
        assert r.json()["error"] == "invalid_credentials"
        assert r.json()["message"] == "Invalid username or password"

    def test_get_user(self, client):
        user_id = register(client).json()["user"]["id"]

        r = client.get(f"/api/user/{user_id}")

        assert r.status_code == 200
        body = r.json()
        assert body["id"] == user_id
        assert body["username"] == "alice"
        assert body["type"] == "candidate"
        assert body["createdAt"]

    def test_get_unknown_user(self, client):
        r = client.get("/api/user/does-not-exist")

        assert r.status_code == 404
        assert r.json()["error"] == "not_found"
        assert r.json()["message"] == "User not found"


class TestFrontend:

    @pytest.fixture
    def frontend_dir(self, tmp_path, monkeypatch):
        (tmp_path / "index.html").write_text("<html>CareerCatalyst</html>")
        (tmp_path / "app.js").write_text("console.log('hi')")
        monkeypatch.setattr(main.settings, "frontend_dir", tmp_path)
        return tmp_path

    def test_index_served_at_root(self, client, frontend_dir):
        r = client.get("/")
        assert r.status_code == 200
        assert "CareerCatalyst" in r.text

    def test_unknown_paths_fall_back_to_index(self, client, frontend_dir):
        r = client.get("/dashboard/interviews")
        assert r.status_code == 200
        assert "<html>" in r.text

    def test_static_file(self, client, frontend_dir):
        r = client.get("/app.js")
        assert r.status_code == 200
        assert "console.log" in r.text

    def test_unknown_api_path_is_404(self, client, frontend_dir):
        assert client.get("/api/nothing-here").status_code == 404

    def test_no_frontend_configured(self, client):
        assert client.get("/dashboard").status_code == 404
