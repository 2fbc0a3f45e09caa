"""AttendancePage - extracts yearly and per-class attendance from attendance.asp.

Two tables on the page, both table.table1sm, told apart by header text:
  "Year | School Days | Whole Day Absences | % | Partial Absences | %"
      one row per calendar year
  "Class | RollsMarked | Absent | ... | %"
      whole-period statistics per class

Older layouts drop the table1sm class, so when no yearly rows turn up the
yearly table is looked for again among all tables.
"""

from portal_sync.dom import Node
from portal_sync.extract import (
    YEAR_RE,
    parse_float,
    parse_int,
    parse_optional_percent,
    parse_percent,
)
from portal_sync.logging import get_logger
from portal_sync.models import Attendance, AttendanceSubject, AttendanceYearly

log = get_logger(__name__)


def _header_text(table: Node, selector: str) -> str:
    header = table.select_one(selector)
    return header.text if header is not None else ""


def _yearly_rows(table: Node) -> list[AttendanceYearly]:
    rows: list[AttendanceYearly] = []
    for row in table.select("tr")[1:]:
        cells = row.select("td")
        if len(cells) < 6:
            continue
        year = cells[0].text
        if not YEAR_RE.match(year):
            continue
        rows.append(
            AttendanceYearly(
                year=year,
                school_days=parse_int(cells[1].text),
                whole_day_absences=parse_int(cells[2].text),
                whole_day_percentage=parse_percent(cells[3].text),
                partial_absences=parse_float(cells[4].text),
                total_percentage=parse_percent(cells[5].text),
            )
        )
    return rows


def _subject_rows(table: Node) -> list[AttendanceSubject]:
    rows: list[AttendanceSubject] = []
    for row in table.select("tr")[1:]:
        cells = row.select("td")
        if len(cells) < 5:
            continue
        class_code = cells[0].text
        if len(class_code) < 2:
            continue
        rows.append(
            AttendanceSubject(
                class_code=class_code,
                rolls_marked=parse_int(cells[1].text),
                absent=parse_int(cells[2].text),
                percentage=parse_optional_percent(cells[4].text),
            )
        )
    return rows


class AttendancePage:
    """Attendance page at /attendance.asp."""

    URL_PATH = "/attendance.asp"

    ATTENDANCE_TABLE = "table.table1sm"
    HEADER_ROW = "tr.title, tr:first-child"

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def extract(self) -> Attendance:
        attendance = Attendance()

        for table in self.doc.select(self.ATTENDANCE_TABLE):
            header = _header_text(table, self.HEADER_ROW)
            if "Year" in header and "School" in header and "Days" in header:
                attendance.yearly.extend(_yearly_rows(table))
            if "Class" in header and "RollsMarked" in header:
                attendance.subjects.extend(_subject_rows(table))

        if not attendance.yearly:
            for table in self.doc.select("table"):
                header = _header_text(table, "tr")
                if "Year" in header and "School" in header:
                    attendance.yearly.extend(_yearly_rows(table))
                    if attendance.yearly:
                        log.debug("attendance_fallback_used")
                        break

        log.info(
            "attendance_extracted",
            yearly=len(attendance.yearly),
            subjects=len(attendance.subjects),
        )
        return attendance
