"""CalendarPage - extracts events from one month of calendar.asp.

Months are addressed by the portal's own month value (``month=251`` is
December 2025). Events show up as ``a.eventitem`` / ``a[data]`` links, and
holidays as cells reading e.g. ``14 Apr Holidays -- Easter Break --``.
Overlapping cells (nested tables) can repeat an event; repeats are removed
when events are merged into the crawl record.
"""

import re

from portal_sync.dom import Node
from portal_sync.logging import get_logger
from portal_sync.models import CalendarEvent

log = get_logger(__name__)

# \s covers the non-breaking space that &nbsp; becomes in cell text
_DATE_FRAGMENT_RE = re.compile(r"(\d{1,2}\s[A-Za-z0-9_]{3})")
_LABEL_RE = re.compile(r"--\s*(.+?)\s*--")

# Empty calendar slots render as "--" placeholders
PLACEHOLDER = "--"


class CalendarPage:
    """Month calendar page at /calendar.asp."""

    URL_PATH = "/calendar.asp"

    EVENT_LINK = "a.eventitem, a[data]"

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def extract(self) -> list[CalendarEvent]:
        events: list[CalendarEvent] = []

        for link in self.doc.select(self.EVENT_LINK):
            title = link.text
            if title and PLACEHOLDER not in title:
                events.append(CalendarEvent(title=title, data=link.attr("data") or ""))

        for cell in self.doc.select("td"):
            text = cell.text
            if "Holidays" not in text and "Event" not in text:
                continue
            label = _LABEL_RE.search(text)
            if label is None:
                continue
            date_fragment = _DATE_FRAGMENT_RE.search(text)
            events.append(
                CalendarEvent(
                    date=date_fragment.group(1) if date_fragment else "",
                    title=label.group(1),
                    type="holiday",
                )
            )

        log.info("calendar_extracted", events=len(events))
        return events
