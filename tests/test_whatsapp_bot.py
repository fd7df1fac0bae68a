"""Tests for src.bot.whatsapp_bot — webhook parsing, signature check and routes.

All ports are faked; no network or real scheduler is involved.
"""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from conftest import FakeFinance, FakeScheduler
from src.bot.whatsapp_bot import build_app, build_assistant, extract_messages, verify_signature
from src.config import settings
from src.core.command_service import HELP_TEXT

USER = settings.AUTHORIZED_USER_NUMBER


def _payload(messages=None, echoes=None):
    value = {"metadata": {"display_phone_number": "15559990000"}}
    if messages is not None:
        value["messages"] = messages
    if echoes is not None:
        value["message_echoes"] = echoes
    return {"object": "whatsapp_business_account", "entry": [{"changes": [{"value": value}]}]}


def _text(body, sender=USER, id="wamid.1", **extra):
    return {"from": sender, "id": id, "type": "text", "text": {"body": body}, **extra}


def _sign(body: bytes) -> str:
    return "sha256=" + hmac.new(
        settings.WHATSAPP_APP_SECRET.encode(), body, hashlib.sha256,
    ).hexdigest()


@pytest.fixture
def app_parts(tmp_path, transport, complete):
    from src.data.activity_log import ActivityLog

    scheduler = FakeScheduler()
    assistant = build_assistant(
        transport=transport,
        scheduler=scheduler,
        finance=FakeFinance(),
        email=AsyncMock(),
        complete=complete,
        activities=ActivityLog(path=str(tmp_path / "activities.json")),
    )
    return build_app(assistant), assistant, scheduler


# ---------------------------------------------------------------------------
# extract_messages
# ---------------------------------------------------------------------------


class TestExtractMessages:
    def test_user_message(self):
        [msg] = extract_messages(_payload(messages=[_text("help")]))
        assert msg.sender == USER
        assert msg.to == "15559990000"
        assert msg.body == "help"
        assert msg.from_me is False
        assert msg.id == "wamid.1"

    def test_echo_is_from_me(self):
        echo = _text("budget", sender="15559990000", to=USER)
        [msg] = extract_messages(_payload(echoes=[echo]))
        assert msg.from_me is True
        assert msg.chat_id == USER

    def test_non_text_ignored(self):
        image = {"from": USER, "id": "wamid.2", "type": "image", "image": {"id": "media"}}
        assert extract_messages(_payload(messages=[image])) == []

    def test_status_update_has_no_messages(self):
        assert extract_messages(_payload()) == []
        assert extract_messages({}) == []


class TestVerifySignature:
    def test_valid(self):
        body = b'{"a": 1}'
        sig = "sha256=" + hmac.new(b"secret", body, hashlib.sha256).hexdigest()
        assert verify_signature(body, sig, "secret") is True

    def test_invalid(self):
        assert verify_signature(b"{}", "sha256=deadbeef", "secret") is False

    def test_missing_header(self):
        assert verify_signature(b"{}", "", "secret") is False

    def test_no_secret_skips_check(self):
        assert verify_signature(b"{}", "", "") is True


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


class TestRoutes:
    def test_verification_challenge(self, app_parts):
        app, _, _ = app_parts
        client = TestClient(app)
        resp = client.get("/webhook", params={
            "hub.mode": "subscribe",
            "hub.verify_token": settings.WHATSAPP_VERIFY_TOKEN,
            "hub.challenge": "1158201444",
        })
        assert resp.status_code == 200
        assert resp.text == "1158201444"

    def test_verification_bad_token(self, app_parts):
        app, _, _ = app_parts
        resp = TestClient(app).get("/webhook", params={
            "hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1",
        })
        assert resp.status_code == 403

    def test_root_banner(self, app_parts):
        app, _, _ = app_parts
        resp = TestClient(app).get("/")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "running" in resp.text

    def test_health(self, app_parts):
        app, _, _ = app_parts
        body = TestClient(app).get("/health").json()
        assert body["status"] == "ok"
        assert body["uptime"] >= 0

    def test_bad_signature_rejected(self, app_parts, transport):
        app, _, _ = app_parts
        body = json.dumps(_payload(messages=[_text("help")])).encode()
        resp = TestClient(app).post(
            "/webhook", content=body, headers={"X-Hub-Signature-256": "sha256=bad"},
        )
        assert resp.status_code == 403
        transport.send_message.assert_not_called()

    def test_message_is_processed_and_answered(self, app_parts, transport):
        app, _, _ = app_parts
        body = json.dumps(_payload(messages=[_text("help")])).encode()
        resp = TestClient(app).post(
            "/webhook", content=body,
            headers={"X-Hub-Signature-256": _sign(body), "Content-Type": "application/json"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
        transport.send_message.assert_awaited_once_with(USER, HELP_TEXT)

    def test_stranger_is_ignored(self, app_parts, transport):
        app, _, _ = app_parts
        body = json.dumps(_payload(messages=[_text("help", sender="15551234567")])).encode()
        resp = TestClient(app).post(
            "/webhook", content=body, headers={"X-Hub-Signature-256": _sign(body)},
        )
        assert resp.status_code == 200
        transport.send_message.assert_not_called()


class TestLifespan:
    def test_starts_and_stops_scheduler(self, app_parts):
        app, assistant, scheduler = app_parts
        assistant.reminders.create("drink water", frequency="daily", time="09:00")

        with TestClient(app):
            assert scheduler.started is True
            assert "reminder_1" in scheduler.jobs
            assert "spending_check" in scheduler.jobs
            assert assistant.reminders.attached is True

        assert scheduler.stopped is True
        assert scheduler.jobs["reminder_1"].cancelled is True
        assert assistant.reminders.attached is False
