"""TimetablePage - extracts the fortnightly Week A / Week B timetable.

DOM structure (timetable.asp?uid=N):
  table.contentSM (older layouts: table[width="98%"])
    tr -> td "Week A"                       week marker
    tr -> td[colspan][bgcolor] "Monday ..." day header (or a single-cell row)
    tr -> td x6: (blank) | P1 | course | class | teacher | room

Rows are read as one fold per table: the week marker and day header rows
update the scan state, data rows emit an entry for the state's week and day.
"""

import re
from dataclasses import dataclass, replace

from portal_sync.dom import Node
from portal_sync.extract import PERIOD_RE
from portal_sync.logging import get_logger
from portal_sync.models import Timetable, TimetableEntry, Weekday

log = get_logger(__name__)

_DAY_RE = re.compile(r"^(Monday|Tuesday|Wednesday|Thursday|Friday)", re.IGNORECASE)


@dataclass(frozen=True)
class _ScanState:
    week: str = "week_a"
    day: Weekday | None = None


def _step(
    state: _ScanState, cells: list[Node]
) -> tuple[_ScanState, TimetableEntry | None]:
    """Advance the scan over one row; returns the new state and any entry."""
    first = cells[0].text if cells else ""

    if "Week A" in first:
        return replace(state, week="week_a"), None
    if "Week B" in first:
        return replace(state, week="week_b"), None

    is_header = len(cells) == 1 or bool(
        cells and cells[0].attr("colspan") and cells[0].attr("bgcolor")
    )
    if is_header:
        match = _DAY_RE.match(first)
        if match:
            return replace(state, day=Weekday(match.group(1).capitalize())), None

    if len(cells) < 6 or state.day is None:
        return state, None

    period = cells[1].text
    course = cells[2].text
    if not PERIOD_RE.match(period) or not course:
        return state, None

    entry = TimetableEntry(
        day=state.day,
        period=period,
        course=course,
        class_code=cells[3].text,
        teacher=cells[4].text,
        room=cells[5].text,
    )
    return state, entry


class TimetablePage:
    """Timetable page at /timetable.asp."""

    URL_PATH = "/timetable.asp"

    TIMETABLE_TABLE = 'table.contentSM, table[width="98%"]'

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def extract(self) -> Timetable:
        timetable = Timetable()

        for table in self.doc.select(self.TIMETABLE_TABLE):
            state = _ScanState()
            for row in table.select("tr"):
                state, entry = _step(state, row.select("td"))
                if entry is not None:
                    getattr(timetable, state.week).append(entry)

        log.info(
            "timetable_extracted",
            week_a=len(timetable.week_a),
            week_b=len(timetable.week_b),
        )
        return timetable
