"""
Tests for Page Fetching and Saved Sessions.
===========================================

Tests for:
- HttpFetcher status and error mapping
- SessionManager cookie loading and expiry
"""

import asyncio
import json
import os
import time

import pytest
import requests

from portal_sync.errors import RateLimitError, TransientError
from portal_sync.fetch import HttpFetcher
from portal_sync.session import SessionManager
from tests.conftest import BASE_URL, FakeResponse, FakeSession

URL = f"{BASE_URL}/notices.asp"


def fetch(fetcher: HttpFetcher, url: str = URL) -> str:
    return asyncio.run(fetcher.fetch(url))


# ─────────────────────────────────────────────────────────────────────────────
# HttpFetcher Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestHttpFetcher:
    """Tests for HttpFetcher."""

    def test_returns_page_text(self):
        session = FakeSession(FakeResponse(200, "<html>ok</html>"))
        fetcher = HttpFetcher(session, timeout=5)

        assert fetch(fetcher) == "<html>ok</html>"
        assert session.requests == [{"method": "GET", "url": URL, "timeout": 5}]

    def test_server_error_is_transient(self):
        fetcher = HttpFetcher(FakeSession(FakeResponse(500)))

        with pytest.raises(TransientError, match="HTTP 500"):
            fetch(fetcher)

    def test_redirect_status_is_transient(self):
        fetcher = HttpFetcher(FakeSession(FakeResponse(302)))

        with pytest.raises(TransientError):
            fetch(fetcher)

    def test_rate_limit(self):
        fetcher = HttpFetcher(FakeSession(FakeResponse(429)))

        with pytest.raises(RateLimitError):
            fetch(fetcher)

    def test_timeout_is_transient(self):
        fetcher = HttpFetcher(FakeSession(requests.Timeout("read timed out")))

        with pytest.raises(TransientError, match="Timed out"):
            fetch(fetcher)

    def test_connection_error_is_transient(self):
        fetcher = HttpFetcher(FakeSession(requests.ConnectionError("refused")))

        with pytest.raises(TransientError, match="refused"):
            fetch(fetcher)

    def test_cookies_and_user_agent_applied(self):
        jar = requests.cookies.RequestsCookieJar()
        jar.set("ASPSESSIONID", "abc", domain="portal.test", path="/")
        fetcher = HttpFetcher(cookies=jar, user_agent="test-agent")

        assert fetcher.session.cookies.get("ASPSESSIONID") == "abc"
        assert fetcher.session.headers["User-Agent"] == "test-agent"
        fetcher.close()


# ─────────────────────────────────────────────────────────────────────────────
# SessionManager Tests
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sessions(tmp_path) -> SessionManager:
    return SessionManager(state_dir=str(tmp_path / "state"), max_session_age_hours=1)


def write_state(manager: SessionManager) -> None:
    state = {
        "cookies": [
            {"name": "ASPSESSIONID", "value": "abc", "domain": "portal.test", "path": "/"},
            {"name": "remember", "value": "1", "domain": "portal.test"},
        ],
        "origins": [],
    }
    manager.state_file.write_text(json.dumps(state), encoding="utf-8")


class TestSessionManager:
    """Tests for SessionManager."""

    def test_creates_state_dir(self, sessions):
        assert sessions.state_dir.is_dir()

    def test_missing_state_is_invalid(self, sessions):
        assert not sessions.is_session_valid()
        assert len(sessions.load_cookies()) == 0

    def test_loads_cookies_from_fresh_state(self, sessions):
        write_state(sessions)
        jar = sessions.load_cookies()

        assert sessions.is_session_valid()
        assert jar.get("ASPSESSIONID") == "abc"
        assert jar.get("remember") == "1"

    def test_expired_state_is_ignored(self, sessions):
        write_state(sessions)
        two_hours_ago = time.time() - 2 * 3600
        os.utime(sessions.state_file, (two_hours_ago, two_hours_ago))

        assert not sessions.is_session_valid()
        assert len(sessions.load_cookies()) == 0

    def test_clear_session(self, sessions):
        write_state(sessions)
        sessions.clear_session()

        assert not sessions.state_file.exists()
        sessions.clear_session()
