"""
Tests for the REST API (api.py): session lifecycle and the structured
error contract.
"""

import lead_desk.api as api_mod
from lead_desk.yaml_config.constants import QUESTIONS, QUICK_REPLIES, REPLY_TEMPLATES, SESSION_INTRO


def _create(client, headers, session_id=None):
    payload = {"session_id": session_id} if session_id else {}
    return client.post("/api/v1/sessions", headers=headers, json=payload)


def _say(client, headers, session_id, text):
    return client.post(
        f"/api/v1/sessions/{session_id}/messages",
        headers=headers,
        json={"text": text},
    )


class TestHealth:

    def test_health_needs_no_auth(self, api_client):
        resp = api_client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "sessions": 0}


class TestSessions:

    def test_create_session(self, api_client, auth_headers):
        resp = _create(api_client, auth_headers, "lead_1")
        assert resp.status_code == 200

        data = resp.json()
        assert data["session_id"] == "lead_1"
        assert data["messages"][0]["sender"] == "assistant"
        assert data["messages"][0]["text"] == SESSION_INTRO
        assert data["quick_replies"] == QUICK_REPLIES
        assert data["badge"] == "Exploring"
        assert data["complete"] is False

    def test_create_without_body(self, api_client, auth_headers):
        resp = api_client.post("/api/v1/sessions", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["session_id"].startswith("sess_")

    def test_duplicate_session_id(self, api_client, auth_headers):
        _create(api_client, auth_headers, "dup")
        resp = _create(api_client, auth_headers, "dup")
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "SESSION_EXISTS"

    def test_conversation(self, api_client, auth_headers):
        _create(api_client, auth_headers, "conv")

        resp = _say(api_client, auth_headers, "conv", "Main ecommerce brand run karta hoon")
        assert resp.status_code == 200
        data = resp.json()
        assert data["lead"]["business"] == "Ecommerce"
        assert data["captured"] == ["business"]
        assert data["interest_level"] == "cold"
        assert data["reply"].split("\n\n")[-1] == QUESTIONS["goal"]

        data = _say(api_client, auth_headers, "conv", "ready, let's start").json()
        assert data["reply"] == REPLY_TEMPLATES["handover"]
        assert data["interest_level"] == "hot"
        assert data["badge"] == "High Intent"

    def test_whitespace_message_is_ignored(self, api_client, auth_headers):
        _create(api_client, auth_headers, "blank")
        data = _say(api_client, auth_headers, "blank", "   ").json()

        assert data["reply"] is None
        assert data["captured"] == []

        messages = api_client.get("/api/v1/sessions/blank/messages", headers=auth_headers).json()
        assert len(messages["messages"]) == 1

    def test_get_lead_and_messages(self, api_client, auth_headers):
        _create(api_client, auth_headers, "view")
        _say(api_client, auth_headers, "view", "main Rohan sharma hoon")

        lead = api_client.get("/api/v1/sessions/view/lead", headers=auth_headers).json()
        assert lead["lead"]["name"] == "Rohan Sharma"
        assert [row["label"] for row in lead["snapshot"]] == [
            "Business", "Goal", "Budget", "Timeline", "Name", "Phone",
        ]

        messages = api_client.get("/api/v1/sessions/view/messages", headers=auth_headers).json()
        assert [m["sender"] for m in messages["messages"]] == ["assistant", "user", "assistant"]

    def test_close_session(self, api_client, auth_headers):
        _create(api_client, auth_headers, "bye")

        resp = api_client.delete("/api/v1/sessions/bye", headers=auth_headers)
        assert resp.json() == {"session_id": "bye", "closed": True}

        resp = api_client.get("/api/v1/sessions/bye/lead", headers=auth_headers)
        assert resp.status_code == 404


class TestErrorContract:

    def test_wrong_key_is_401(self, api_client):
        resp = _create(api_client, {"Authorization": "Bearer wrong-key"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    def test_missing_bearer_prefix_is_401(self, api_client):
        resp = _create(api_client, {"Authorization": "test-key"})
        assert resp.status_code == 401

    def test_missing_header_is_400(self, api_client):
        resp = api_client.post("/api/v1/sessions", json={})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "BAD_REQUEST"

    def test_invalid_payload_is_400(self, api_client, auth_headers):
        _create(api_client, auth_headers, "bad")
        resp = api_client.post("/api/v1/sessions/bad/messages", headers=auth_headers, json={})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "BAD_REQUEST"

    def test_unknown_session_is_404(self, api_client, auth_headers):
        resp = _say(api_client, auth_headers, "nope", "hello")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "SESSION_NOT_FOUND"

    def test_delete_unknown_is_404(self, api_client, auth_headers):
        resp = api_client.delete("/api/v1/sessions/nope", headers=auth_headers)
        assert resp.status_code == 404

    def test_internal_error_is_500(self, api_client, auth_headers, monkeypatch):
        _create(api_client, auth_headers, "boom")
        bot = api_mod.session_manager.get("boom")

        async def boom(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(bot, "submit", boom)

        resp = _say(api_client, auth_headers, "boom", "hello")
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "INTERNAL"
