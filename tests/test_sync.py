"""
Tests for Sync Submission and Configuration.
============================================

Tests for:
- SyncClient payload shape, retries and error mapping
- PortalConfig defaults and environment overrides
"""

import pytest
import requests

from portal_sync.config import PortalConfig
from portal_sync.errors import SyncError, TransientError
from portal_sync.models import AggregateRecord, ClassInfo, UserInfo
from portal_sync.sync import SyncClient, has_login_token
from tests.conftest import FakeResponse, FakeSession

SYNC_URL = "http://localhost:3000/api/extension/sync"


def make_client(session: FakeSession, attempts: int = 3) -> SyncClient:
    return SyncClient(SYNC_URL, session, timeout=5, attempts=attempts, backoff=0)


def make_record() -> AggregateRecord:
    return AggregateRecord(
        user=UserInfo(school="Springfield High", name="Lisa Simpson", uid="12345"),
        classes=[ClassInfo(course="Maths", class_code="10A", teacher="Mr Smith")],
    )


# ─────────────────────────────────────────────────────────────────────────────
# SyncClient Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSyncClient:
    """Tests for SyncClient.submit."""

    def test_returns_response_unchanged(self):
        body = {"success": True, "loginToken": "tok-1"}
        session = FakeSession(FakeResponse(200, payload=body))

        assert make_client(session).submit(make_record()) == body

    def test_posts_camel_case_payload(self):
        session = FakeSession(FakeResponse(200, payload={}))
        make_client(session).submit(make_record())

        request = session.requests[0]
        assert request["url"] == SYNC_URL
        assert request["timeout"] == 5
        payload = request["json"]
        assert payload["user"]["uid"] == "12345"
        assert payload["classes"][0]["classCode"] == "10A"
        assert "lastUpdated" in payload

    def test_retries_server_errors(self):
        session = FakeSession(
            FakeResponse(503),
            requests.ConnectionError("reset"),
            FakeResponse(200, payload={"loginToken": "tok-2"}),
        )

        assert make_client(session).submit(make_record()) == {"loginToken": "tok-2"}
        assert len(session.requests) == 3

    def test_gives_up_after_attempts(self):
        session = FakeSession(FakeResponse(502), FakeResponse(502))

        with pytest.raises(TransientError):
            make_client(session, attempts=2).submit(make_record())
        assert len(session.requests) == 2

    def test_client_error_is_not_retried(self):
        session = FakeSession(FakeResponse(400), FakeResponse(200, payload={}))

        with pytest.raises(SyncError, match="400"):
            make_client(session).submit(make_record())
        assert len(session.requests) == 1

    def test_non_json_body(self):
        session = FakeSession(FakeResponse(200, text="<html>"))

        with pytest.raises(SyncError, match="non-JSON"):
            make_client(session).submit(make_record())


# ─────────────────────────────────────────────────────────────────────────────
# Configuration Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPortalConfig:
    """Tests for PortalConfig."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORTAL_UID", raising=False)
        monkeypatch.delenv("PORTAL_ANCHOR_MONTH_VALUE", raising=False)
        config = PortalConfig(_env_file=None)

        assert config.base_url == "https://millennium.education/portal"
        assert config.anchor_month_value == 251
        assert config.page_delay_seconds == 0.15
        assert config.uid == ""

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PORTAL_UID", "999")
        monkeypatch.setenv("PORTAL_ANCHOR_MONTH_VALUE", "260")
        config = PortalConfig(_env_file=None)

        assert config.uid == "999"
        assert config.anchor_month_value == 260


# ─────────────────────────────────────────────────────────────────────────────
# Response Helper Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestLoginToken:
    """Tests for has_login_token and non-object sync responses."""

    def test_object_with_token(self):
        assert has_login_token({"loginToken": "tok-1"})

    def test_missing_or_empty_token(self):
        assert not has_login_token({"success": True})
        assert not has_login_token({"loginToken": ""})

    def test_non_object_bodies(self):
        assert not has_login_token(["loginToken"])
        assert not has_login_token("loginToken")
        assert not has_login_token(None)

    def test_list_body_returned_unchanged(self):
        session = FakeSession(FakeResponse(200, payload=[{"ok": True}]))

        assert make_client(session).submit(make_record()) == [{"ok": True}]
