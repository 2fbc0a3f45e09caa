"""PortalCrawler - one sequential pass over every portal page.

The crawl plan is fixed: the single-fetch pages (timetable, notices, grades,
attendance, reports, both classes variants), ten calendar months around the
configured anchor month value, then the notice pages for each day within a
week either side of today (today itself is the plain notices page).

Pages are fetched strictly one at a time with a short pause in between. A
page that fails to fetch or parse is logged, recorded as a failed outcome
and skipped. Only two things stop the crawl, both before any page in the
plan is fetched: a landing page that turns out to be the login form (the
saved session has expired) and an unresolvable user id.
"""

import asyncio
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any
from urllib.parse import parse_qs, urlsplit

from portal_sync.config import PortalConfig, get_config
from portal_sync.dom import Node, parse_html
from portal_sync.errors import AuthenticationError, MissingUserIdError, ScrapingError
from portal_sync.extract import encode_notice_date, parse_notice_date_param
from portal_sync.fetch import PageFetcher
from portal_sync.logging import crawl_context, get_logger
from portal_sync.merge import fold_page
from portal_sync.models import (
    AggregateRecord,
    CrawlProgress,
    CrawlResult,
    PageDescriptor,
    PageOutcome,
    UserInfo,
)
from portal_sync.pages import (
    AttendancePage,
    CalendarPage,
    ClassesPage,
    DashboardPage,
    GradesPage,
    NoticesPage,
    ReportsPage,
    TimetablePage,
)
from portal_sync.pages.dashboard import extract_user_info, is_login_page

log = get_logger(__name__)

ProgressCallback = Callable[[CrawlProgress], None]


def calendar_month_values(anchor: int, before: int = 3, after: int = 6) -> list[int]:
    """Portal month values from ``anchor - before`` to ``anchor + after``."""
    return [anchor + offset for offset in range(-before, after + 1)]


def notice_window(today: date, days: int = 7) -> list[tuple[int, date]]:
    """(offset, day) pairs for each day within ``days`` of today, today excluded."""
    return [
        (offset, today + timedelta(days=offset))
        for offset in range(-days, days + 1)
        if offset != 0
    ]


def build_page_plan(
    base_url: str,
    uid: str,
    *,
    today: date,
    anchor_month_value: int = 251,
    months_before: int = 3,
    months_after: int = 6,
    notice_window_days: int = 7,
) -> list[PageDescriptor]:
    """Ordered list of every page one crawl fetches."""
    plan = [
        PageDescriptor(
            name="Timetable",
            url=f"{base_url}{TimetablePage.URL_PATH}?uid={uid}",
            type="timetable",
        ),
        PageDescriptor(
            name="Notices", url=f"{base_url}{NoticesPage.URL_PATH}", type="notices"
        ),
        PageDescriptor(
            name="Grades", url=f"{base_url}{GradesPage.URL_PATH}?uid={uid}", type="grades"
        ),
        PageDescriptor(
            name="Attendance",
            url=f"{base_url}{AttendancePage.URL_PATH}?uid={uid}",
            type="attendance",
        ),
        PageDescriptor(
            name="Reports",
            url=f"{base_url}{ReportsPage.URL_PATH}?uid={uid}",
            type="reports",
        ),
        PageDescriptor(
            name="Classes (Clean)",
            url=f"{base_url}{ClassesPage.URL_PATH}",
            type="classes",
        ),
        PageDescriptor(
            name="Classes (UID)",
            url=f"{base_url}{ClassesPage.URL_PATH}?uid={uid}",
            type="classes",
        ),
    ]

    months = calendar_month_values(anchor_month_value, months_before, months_after)
    for idx, value in enumerate(months, start=1):
        plan.append(
            PageDescriptor(
                name=f"Calendar (Month {idx})",
                url=f"{base_url}{CalendarPage.URL_PATH}?uid={uid}&month={value}",
                type="calendar",
            )
        )

    for offset, day in notice_window(today, notice_window_days):
        plan.append(
            PageDescriptor(
                name=f"Notices ({offset:+d}d)",
                url=f"{base_url}{NoticesPage.URL_PATH}?date={encode_notice_date(day)}",
                type="notices",
            )
        )

    return plan


def scrape_page(page: PageDescriptor, doc: Node, today: date | None = None) -> Any:
    """Run the page object matching ``page.type`` over ``doc``.

    Notice pages without a usable ``date`` parameter are stamped with ``today``.
    """
    if page.type == "timetable":
        return TimetablePage(doc).extract()
    if page.type == "notices":
        query = parse_qs(urlsplit(page.url).query)
        notice_date = parse_notice_date_param(query.get("date", [""])[0])
        return NoticesPage(doc, notice_date or today).extract()
    if page.type == "grades":
        return GradesPage(doc).extract()
    if page.type == "attendance":
        return AttendancePage(doc).extract()
    if page.type == "reports":
        return ReportsPage(doc, page_url=page.url).extract()
    if page.type == "classes":
        return ClassesPage(doc).extract()
    if page.type == "calendar":
        return CalendarPage(doc).extract()
    if page.type == "dashboard":
        return DashboardPage(doc).extract()
    raise ValueError(f"Unknown page type {page.type!r}")


class PortalCrawler:
    """Fetches and scrapes every portal page into one AggregateRecord.

    Args:
        fetcher: Where page HTML comes from (an authenticated context).
        config: Crawl settings; the environment-loaded singleton by default.
        on_progress: Called before each page with (current, total, page name).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        config: PortalConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config or get_config()
        self.on_progress = on_progress

    async def _fetch_doc(self, url: str) -> Node:
        doc = parse_html(await self.fetcher.fetch(url))
        if is_login_page(doc):
            raise AuthenticationError(f"Portal returned its login form for {url}")
        return doc

    async def _landing(
        self, landing_html: str | None
    ) -> tuple[Node | None, PageOutcome]:
        """Parse the supplied landing page, or fetch it.

        Raises:
            AuthenticationError: If the landing page is the portal login form.
        """
        page = PageDescriptor(
            name="Dashboard",
            url=f"{self.config.base_url}{DashboardPage.URL_PATH}",
            type="dashboard",
        )
        if landing_html is not None:
            doc = parse_html(landing_html)
            if is_login_page(doc):
                log.error("landing_page_is_login_form")
                raise AuthenticationError("Supplied landing page is the portal login form")
            return doc, PageOutcome(**page.model_dump(), ok=True)

        try:
            doc = await self._fetch_doc(page.url)
        except AuthenticationError:
            log.error("landing_page_is_login_form", url=page.url)
            raise
        except ScrapingError as e:
            log.warning("landing_page_unavailable", error=str(e))
            return None, PageOutcome(**page.model_dump(), ok=False, error=str(e))
        return doc, PageOutcome(**page.model_dump(), ok=True)

    def resolve_user(self, doc: Node | None) -> UserInfo:
        """User info from the landing page; a configured uid takes precedence.

        Raises:
            MissingUserIdError: If no uid is configured or found on the page.
        """
        user = extract_user_info(doc) if doc is not None else UserInfo()
        uid = self.config.uid or user.uid
        if not uid:
            log.error("user_id_missing")
            raise MissingUserIdError("No portal user id found; cannot build page URLs")
        user.uid = uid
        return user

    async def _process(
        self, page: PageDescriptor, record: AggregateRecord, today: date
    ) -> PageOutcome:
        try:
            doc = await self._fetch_doc(page.url)
            fold_page(record, page.type, scrape_page(page, doc, today))
        except ScrapingError as e:
            log.warning("page_skipped", page=page.name, url=page.url, error=str(e))
            return PageOutcome(**page.model_dump(), ok=False, error=str(e))
        except Exception as e:
            # One malformed page must not end the crawl
            log.exception("page_failed", page=page.name, url=page.url)
            return PageOutcome(
                **page.model_dump(), ok=False, error=f"{type(e).__name__}: {e}"
            )

        log.debug("page_processed", page=page.name)
        return PageOutcome(**page.model_dump(), ok=True)

    async def run(
        self, landing_html: str | None = None, *, today: date | None = None
    ) -> CrawlResult:
        """Crawl every page in the plan.

        Args:
            landing_html: HTML of the portal page the user is already on. The
                landing page is fetched when omitted.
            today: Reference day for the notice window (default: today).

        Returns:
            The aggregate record plus one outcome per page attempted.

        Raises:
            AuthenticationError: If the landing page is the portal login form.
            MissingUserIdError: If the user id cannot be resolved.
        """
        today = today or date.today()
        doc, landing_outcome = await self._landing(landing_html)
        user = self.resolve_user(doc)

        record = AggregateRecord(user=user)
        outcomes = [landing_outcome]
        if doc is not None:
            try:
                fold_page(record, "dashboard", DashboardPage(doc).extract())
            except Exception:
                log.exception("dashboard_failed")

        plan = build_page_plan(
            self.config.base_url,
            user.uid,
            today=today,
            anchor_month_value=self.config.anchor_month_value,
            months_before=self.config.calendar_offsets_before,
            months_after=self.config.calendar_offsets_after,
            notice_window_days=self.config.notice_window_days,
        )
        with crawl_context(uid=user.uid, base_url=self.config.base_url):
            log.info("crawl_started", pages=len(plan))

            for current, page in enumerate(plan, start=1):
                if self.on_progress is not None:
                    self.on_progress(
                        CrawlProgress(current=current, total=len(plan), page=page.name)
                    )
                outcomes.append(await self._process(page, record, today))
                if current < len(plan) and self.config.page_delay_seconds > 0:
                    await asyncio.sleep(self.config.page_delay_seconds)

            result = CrawlResult(record=record, outcomes=outcomes)
            log.info(
                "crawl_complete",
                timetable_a=len(record.timetable.week_a),
                timetable_b=len(record.timetable.week_b),
                notices=len(record.notices),
                grades=len(record.grades),
                reports=len(record.reports),
                classes=len(record.classes),
                calendar=len(record.calendar),
                failed_pages=len(result.failed),
            )
        return result
