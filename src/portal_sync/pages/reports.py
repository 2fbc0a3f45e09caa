"""ReportsPage - lists semester report links from reports.asp.

Links look like ``<a href="viewreport.asp?...&year=2025&s=1">Year 11 -
Semester 1 Report - 2025</a>``. Year level, semester and calendar year come
from the link text, falling back to the ``year`` and ``s`` query parameters.
"""

import re
from urllib.parse import parse_qs, urljoin, urlsplit

from portal_sync.dom import Node
from portal_sync.logging import get_logger
from portal_sync.models import Report

log = get_logger(__name__)

_YEAR_LEVEL_RE = re.compile(r"Year\s*(\d+)", re.IGNORECASE)
_SEMESTER_RE = re.compile(r"Semester\s*(\d)", re.IGNORECASE)
_CALENDAR_YEAR_RE = re.compile(r"\b(20\d{2})\b")


def _first_digits(values: list[str], pattern: str) -> str | None:
    for value in values:
        if re.fullmatch(pattern, value):
            return value
    return None


def sort_reports(reports: list[Report]) -> list[Report]:
    """Newest first: calendar year descending, then semester descending."""
    return sorted(reports, key=lambda r: (-r.calendar_year, -r.semester))


class ReportsPage:
    """Reports page at /reports.asp."""

    URL_PATH = "/reports.asp"

    REPORT_LINK = 'a[href*="viewreport"]'

    def __init__(self, doc: Node, page_url: str = "") -> None:
        self.doc = doc
        self.page_url = page_url

    def _report(self, text: str, href: str) -> Report:
        query = parse_qs(urlsplit(href).query)

        year_level = _YEAR_LEVEL_RE.search(text)
        semester = _SEMESTER_RE.search(text)
        calendar_year = _CALENDAR_YEAR_RE.search(text)

        semester_value = (
            semester.group(1) if semester else _first_digits(query.get("s", []), r"\d")
        )
        year_value = (
            calendar_year.group(1)
            if calendar_year
            else _first_digits(query.get("year", []), r"\d{4}")
        )

        return Report(
            title=text,
            url=href,
            year_level=f"Year {year_level.group(1)}" if year_level else "",
            semester=int(semester_value or 0),
            calendar_year=int(year_value or 0),
        )

    def extract(self) -> list[Report]:
        reports: list[Report] = []

        for link in self.doc.select(self.REPORT_LINK):
            text = link.text
            if "Report" not in text:
                continue
            href = link.attr("href") or ""
            if self.page_url:
                href = urljoin(self.page_url, href)
            reports.append(self._report(text, href))

        reports = sort_reports(reports)
        log.info("reports_extracted", reports=len(reports))
        return reports
