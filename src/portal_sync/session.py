"""Saved browser session handling for the portal.

The crawl never logs in. It reuses a Playwright storage state (cookies,
localStorage) saved from a browser that is already signed in to the portal,
either by restoring it into a new browser context or by handing its cookies
to a requests session.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from requests.cookies import RequestsCookieJar

from portal_sync.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page

logger = get_logger(__name__)


class SessionManager:
    """Manages Playwright storage state persistence and validation."""

    def __init__(
        self, state_dir: str = "data/state", max_session_age_hours: int = 24
    ) -> None:
        """Initialize SessionManager.

        Args:
            state_dir: Directory to store session state files.
            max_session_age_hours: Maximum age of session before considering expired.
        """
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / "portal_session.json"
        self.max_session_age_hours = max_session_age_hours

        self.state_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            "session_manager_initialized",
            state_file=str(self.state_file),
            max_age_hours=max_session_age_hours,
        )

    def is_session_valid(self) -> bool:
        """Check if a saved session exists and is still fresh.

        Returns:
            True if session file exists and is younger than max_session_age_hours.
        """
        if not self.state_file.exists():
            logger.debug("session_check", result="missing", reason="file_not_found")
            return False

        file_mtime = datetime.fromtimestamp(self.state_file.stat().st_mtime)
        age = datetime.now() - file_mtime
        max_age = timedelta(hours=self.max_session_age_hours)

        if age > max_age:
            logger.info(
                "session_check",
                result="expired",
                age_hours=age.total_seconds() / 3600,
                max_hours=self.max_session_age_hours,
            )
            return False

        logger.debug(
            "session_check",
            result="valid",
            age_hours=age.total_seconds() / 3600,
        )
        return True

    def load_cookies(self) -> RequestsCookieJar:
        """Cookies from the saved session, ready for a requests session.

        Returns an empty jar when there is no fresh saved session.
        """
        jar = RequestsCookieJar()
        if not self.is_session_valid():
            return jar

        state = json.loads(self.state_file.read_text(encoding="utf-8"))
        for cookie in state.get("cookies", []):
            jar.set(
                cookie["name"],
                cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
            )

        logger.debug("session_cookies_loaded", cookies=len(jar))
        return jar

    async def save_session(self, context: "BrowserContext") -> None:
        """Save browser context storage state to disk.

        Args:
            context: Playwright BrowserContext with active session.
        """
        await context.storage_state(path=str(self.state_file))
        logger.info("session_saved", path=str(self.state_file))

    async def create_context(self, browser: "Browser") -> "BrowserContext":
        """Create browser context, restoring session if valid.

        Args:
            browser: Playwright Browser instance.

        Returns:
            BrowserContext with restored session or fresh context.
        """
        if self.is_session_valid():
            context = await browser.new_context(storage_state=str(self.state_file))
            logger.info(
                "context_created", type="restored", state_file=str(self.state_file)
            )
        else:
            context = await browser.new_context()
            logger.info("context_created", type="fresh", reason="no_valid_session")

        return context

    async def check_page_authenticated(self, page: "Page") -> bool:
        """Soft check that a page is not the portal login form.

        Args:
            page: Playwright Page to check.

        Returns:
            True if page appears to be authenticated, False otherwise.
        """
        if "login" in page.url.lower():
            logger.debug("auth_check", result="not_authenticated", reason="login_page")
            return False

        password_input = await page.query_selector('input[type="password"]')
        if password_input:
            logger.debug(
                "auth_check", result="not_authenticated", reason="login_form_found"
            )
            return False

        logger.debug("auth_check", result="authenticated")
        return True

    def clear_session(self) -> None:
        """Delete saved session state file."""
        if self.state_file.exists():
            self.state_file.unlink()
            logger.info("session_cleared", path=str(self.state_file))
        else:
            logger.debug("session_clear_skipped", reason="file_not_found")
