"""Page fetchers: turn a portal URL into HTML from an authenticated context.

Two implementations of ``PageFetcher``:

- ``HttpFetcher`` - a requests session carrying the cookies of a saved
  browser session. Blocking calls run in a worker thread.
- ``BrowserFetcher`` - a live Playwright page; each URL is fetched with the
  page's own ``fetch()`` so the browser's session cookies are sent along.

Both raise ``TransientError`` (``RateLimitError`` for HTTP 429) on network
errors, timeouts and non-2xx responses; the crawl treats those as "skip
this page".
"""

import asyncio
from typing import TYPE_CHECKING, Protocol

import requests
from playwright.async_api import Error as PlaywrightError

from portal_sync.errors import RateLimitError, TransientError
from portal_sync.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Page, Route

log = get_logger(__name__)

BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset(
    {"image", "stylesheet", "font", "media", "other"}
)

# The crawl only reads; anything that could modify portal state is refused.
_BLOCKED_METHODS: frozenset[str] = frozenset({"POST", "PUT", "DELETE", "PATCH"})

# In-page fetch with the session's cookies; times out via AbortController
_FETCH_SCRIPT = """async ({url, timeoutMs}) => {
    const controller = new AbortController();
    const timer = setTimeout(() => controller.abort(), timeoutMs);
    try {
        const r = await fetch(url, {credentials: 'include', signal: controller.signal});
        return {status: r.status, ok: r.ok, text: await r.text()};
    } finally {
        clearTimeout(timer);
    }
}"""


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


def _raise_for_status(status: int, url: str) -> None:
    if status == 429:
        raise RateLimitError(f"Rate limited fetching {url}")
    if not 200 <= status < 300:
        raise TransientError(f"HTTP {status} fetching {url}")


class HttpFetcher:
    """Fetch portal pages with requests.

    Args:
        session: Session to use; a new one is created when omitted.
        cookies: Cookies of an authenticated portal session.
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header to send.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        cookies: requests.cookies.RequestsCookieJar | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        if cookies is not None:
            self.session.cookies.update(cookies)
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    def _get(self, url: str) -> str:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransientError(f"Timed out fetching {url}") from e
        except requests.RequestException as e:
            raise TransientError(f"Failed to fetch {url}: {e}") from e

        _raise_for_status(response.status_code, url)
        return response.text

    async def fetch(self, url: str) -> str:
        return await asyncio.to_thread(self._get, url)

    def close(self) -> None:
        self.session.close()


class BrowserFetcher:
    """Fetch portal pages from inside an authenticated Playwright page."""

    def __init__(self, page: "Page", *, timeout: float = 30.0) -> None:
        self.page = page
        self.timeout = timeout

    async def fetch(self, url: str) -> str:
        try:
            result = await self.page.evaluate(
                _FETCH_SCRIPT, {"url": url, "timeoutMs": int(self.timeout * 1000)}
            )
        except PlaywrightError as e:
            raise TransientError(f"Failed to fetch {url}: {e}") from e

        _raise_for_status(int(result["status"]), url)
        return result["text"]


async def configure_page_for_scraping(page: "Page") -> None:
    """Set up a Playwright page for a read-only crawl.

    Blocks unnecessary resource types (images, stylesheets, fonts, media)
    and every state-modifying request method.

    Args:
        page: Playwright Page instance.
    """

    async def _block_resources(route: "Route") -> None:
        request = route.request

        if request.method in _BLOCKED_METHODS:
            log.warning(
                "blocked_mutating_request",
                method=request.method,
                url=request.url,
            )
            await route.abort("blockedbyclient")
            return

        if request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _block_resources)
    page.set_default_timeout(30000)
    page.set_default_navigation_timeout(30000)
