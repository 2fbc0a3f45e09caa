"""Crawl the student portal and write the aggregate record as JSON.

Reuses a saved, already signed-in browser session (see SessionManager); the
script never logs in by itself.

Run with: python scripts/crawl_portal.py
Browser:  python scripts/crawl_portal.py --browser --headed
Output:   python scripts/crawl_portal.py --output data/portal.json
Sync:     python scripts/crawl_portal.py --sync
Offline:  python scripts/crawl_portal.py --landing saved/portal.html --uid 12345
Reset:    python scripts/crawl_portal.py --reset-session

Exit codes:
  0 = success (JSON on stdout, or file written with --output)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from playwright.async_api import async_playwright

from portal_sync.config import PortalConfig, get_config
from portal_sync.crawl import PortalCrawler
from portal_sync.errors import ScrapingError
from portal_sync.fetch import BrowserFetcher, HttpFetcher, configure_page_for_scraping
from portal_sync.logging import setup_logging
from portal_sync.models import CrawlProgress, CrawlResult
from portal_sync.session import SessionManager
from portal_sync.sync import SyncClient, has_login_token

load_dotenv()


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Crawl the student portal into one JSON record.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        help="Fetch through a Playwright browser instead of plain HTTP.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Launch browser in headed mode (visible window). Implies --browser.",
    )
    parser.add_argument(
        "--landing",
        type=str,
        default=None,
        help="Saved HTML of the portal landing page (skips fetching it).",
    )
    parser.add_argument(
        "--uid",
        type=str,
        default=None,
        help="Portal user id (default: read from the landing page).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the record to this file instead of stdout.",
    )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Submit the record to the sync endpoint when the crawl finishes.",
    )
    parser.add_argument(
        "--reset-session",
        action="store_true",
        help="Delete the saved browser session and exit.",
    )
    return parser.parse_args()


def _report_progress(progress: CrawlProgress) -> None:
    _log(f"  [{progress.current}/{progress.total}] {progress.page}")


async def _crawl_with_browser(
    config: PortalConfig, sessions: SessionManager, headed: bool
) -> CrawlResult:
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=not headed)
        context = await sessions.create_context(browser)
        page = await context.new_page()
        await configure_page_for_scraping(page)

        await page.goto(f"{config.base_url}/", wait_until="networkidle")
        if not await sessions.check_page_authenticated(page):
            await browser.close()
            raise ScrapingError(
                "Browser session is not signed in to the portal; "
                "sign in once and save the session first"
            )
        landing_html = await page.content()

        fetcher = BrowserFetcher(page, timeout=config.fetch_timeout_seconds)
        crawler = PortalCrawler(fetcher, config, on_progress=_report_progress)
        result = await crawler.run(landing_html)

        await sessions.save_session(context)
        await browser.close()
    return result


async def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)
    if args.uid:
        config = config.model_copy(update={"uid": args.uid})

    sessions = SessionManager(config.state_dir, config.max_session_age_hours)
    if args.reset_session:
        sessions.clear_session()
        _log(f"crawl_portal: saved session removed ({sessions.state_file})")
        return

    _log(f"crawl_portal: starting ({config.base_url})")

    if args.browser or args.headed:
        result = await _crawl_with_browser(config, sessions, args.headed)
    else:
        landing_html = None
        if args.landing:
            landing_html = Path(args.landing).read_text(encoding="utf-8")
        fetcher = HttpFetcher(
            cookies=sessions.load_cookies(),
            timeout=config.fetch_timeout_seconds,
            user_agent=config.user_agent,
        )
        try:
            crawler = PortalCrawler(fetcher, config, on_progress=_report_progress)
            result = await crawler.run(landing_html)
        finally:
            fetcher.close()

    record = result.record
    for outcome in result.failed:
        _log(f"  [FAILED] {outcome.name}: {outcome.error}")

    payload = json.dumps(record.to_payload(), indent=2, ensure_ascii=False)
    if args.output:
        output_file = Path(args.output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        _log(f"  Record written -> {args.output}")
    else:
        print(payload)

    if args.sync:
        client = SyncClient(
            config.sync_url,
            timeout=config.fetch_timeout_seconds,
            attempts=config.sync_attempts,
        )
        response = client.submit(record)
        token = "yes" if has_login_token(response) else "no"
        _log(f"  Synced -> {config.sync_url} (login token: {token})")

    _log(
        f"crawl_portal: done ({len(result.outcomes) - len(result.failed)}"
        f"/{len(result.outcomes)} pages ok)"
    )


if __name__ == "__main__":
    args = _parse_args()
    try:
        asyncio.run(main(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
