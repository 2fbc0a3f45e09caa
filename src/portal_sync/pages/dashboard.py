"""DashboardPage - the portal landing page.

The landing page identifies the signed-in student and carries two widgets:

  table.grey td > b          "School Name : Student Name"
  a[href*="uid="]            navbar links carrying the numeric user id
  #timetable .jdash-body table.table1
      tr -> td <b>P1</b> | room | subject | teacher | td <span style=...>
      the span's background colour gives the roll-call status
  #mydiary .jdash-body #diary div
      <b>title</b> <small><i>Thu 4 SEP 2025 description</i></small>

It is also where an expired session shows up: the portal serves its login
form instead of the requested page.
"""

import re

from portal_sync.dom import Node
from portal_sync.extract import PERIOD_RE
from portal_sync.logging import get_logger
from portal_sync.models import (
    AttendanceStatus,
    Dashboard,
    DashboardLesson,
    DiaryEntry,
    UserInfo,
)

log = get_logger(__name__)

_UID_RE = re.compile(r"uid=(\d+)")
_DIARY_DATE_RE = re.compile(r"(\w{3} \d{1,2} \w{3})")
_DIARY_DESCRIPTION_RE = re.compile(r"\d{4}\s*(.+)")

# Roll-call span colours on the today widget
STATUS_COLOURS: dict[str, AttendanceStatus] = {
    "#20e020": "present",
    "#ff0000": "absent",
    "#ffa500": "partial",
}


def extract_user_id(doc: Node) -> str | None:
    """Numeric user id from the first link carrying ``uid=``."""
    for link in doc.select('a[href*="uid="]'):
        match = _UID_RE.search(link.attr("href") or "")
        if match:
            return match.group(1)
    return None


def extract_user_info(doc: Node) -> UserInfo:
    """School and student name from the header bar, plus the user id."""
    uid = extract_user_id(doc)
    for cell in doc.select("td"):
        bold = cell.select_one("b")
        if bold is None or ":" not in bold.text:
            continue
        parts = [part.strip() for part in bold.text.split(":")]
        if len(parts) >= 2:
            return UserInfo(school=parts[0], name=parts[1], uid=uid)
    return UserInfo(uid=uid)


def is_login_page(doc: Node) -> bool:
    """True when the portal served its login form (session expired)."""
    return doc.select_one('input[type="password"]') is not None


def _attendance_status(cell: Node) -> AttendanceStatus:
    span = cell.select_one("span")
    if span is None:
        return "unmarked"
    style = (span.attr("style") or "").lower()
    for colour, status in STATUS_COLOURS.items():
        if colour in style:
            return status
    return "unmarked"


class DashboardPage:
    """Portal landing page at /."""

    URL_PATH = "/"

    # Tried in order; the first selector that yields lessons wins
    TODAY_ROWS = (
        "#timetable .jdash-body table.table1 tr",
        ".jdash-widget .jdash-body table.table1 tr",
        "table.table1 tr",
        "#dashboard table tr",
    )
    DIARY_ITEM = "#mydiary .jdash-body #diary div"

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def _today(self, selector: str) -> list[DashboardLesson]:
        lessons: list[DashboardLesson] = []
        for row in self.doc.select(selector):
            cells = row.select("td")
            if len(cells) < 4:
                continue
            bold = cells[0].select_one("b")
            period = (bold.text if bold is not None else "") or cells[0].text
            if not PERIOD_RE.match(period):
                continue
            subject = cells[2].text
            teacher = cells[3].text
            if not subject or not teacher:
                continue
            lessons.append(
                DashboardLesson(
                    period=period,
                    room=cells[1].text,
                    subject=subject,
                    teacher=teacher,
                    attendance_status=(
                        _attendance_status(cells[4]) if len(cells) >= 5 else "unmarked"
                    ),
                )
            )
        return lessons

    def _diary(self) -> list[DiaryEntry]:
        entries: list[DiaryEntry] = []
        for item in self.doc.select(self.DIARY_ITEM):
            title_node = item.select_one("b")
            date_node = item.select_one("small i")
            title = title_node.text if title_node is not None else ""
            date_text = date_node.text if date_node is not None else ""
            if not title or not date_text:
                continue
            date_match = _DIARY_DATE_RE.search(date_text)
            description = _DIARY_DESCRIPTION_RE.search(date_text)
            entries.append(
                DiaryEntry(
                    date=date_match.group(1) if date_match else date_text,
                    title=title,
                    description=description.group(1).strip() if description else None,
                )
            )
        return entries

    def extract(self) -> Dashboard:
        today: list[DashboardLesson] = []
        for selector in self.TODAY_ROWS:
            today = self._today(selector)
            if today:
                break

        dashboard = Dashboard(today=today, diary=self._diary())
        log.info(
            "dashboard_extracted", lessons=len(dashboard.today), diary=len(dashboard.diary)
        )
        return dashboard
