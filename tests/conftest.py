"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Portal page HTML samples
- In-memory fetcher and HTTP session fakes
- Crawl configuration overrides
"""

from collections.abc import Callable
from datetime import date

import pytest

from portal_sync.config import PortalConfig
from portal_sync.dom import Node, parse_html

BASE_URL = "https://portal.test/portal"


# ─────────────────────────────────────────────────────────────────────────────
# Page HTML Fixtures
# ─────────────────────────────────────────────────────────────────────────────


LANDING_HTML = """
<html><body>
<table class="grey"><tr><td><b>Springfield High : Lisa Simpson</b></td></tr></table>
<a href="timetable.asp?uid=12345">Timetable</a>
<div id="timetable"><div class="jdash-body"><table class="table1">
  <tr><td><b>P1</b></td><td>G12</td><td>Maths</td><td>Mr Smith</td>
      <td><span style="background-color:#20e020">&nbsp;</span></td></tr>
  <tr><td><b>P2</b></td><td>B4</td><td>English</td><td>Ms Lee</td>
      <td><span style="background-color:#FF0000"></span></td></tr>
  <tr><td><b>P3</b></td><td>L1</td><td>Science</td><td>Dr Who</td><td><span></span></td></tr>
  <tr><td><b>Lunch</b></td><td></td><td></td><td></td></tr>
</table></div></div>
<div id="mydiary"><div class="jdash-body"><div id="diary">
  <div><b>Excursion</b> <small><i>Thu 4 SEP 2025 Museum visit</i></small></div>
  <div><b>No date</b></div>
</div></div></div>
</body></html>
"""

TIMETABLE_HTML = """
<html><body>
<table class="contentSM">
  <tr><td>Week A</td></tr>
  <tr><td colspan="6" bgcolor="#cccccc">Monday 3 March</td></tr>
  <tr><td></td><td>P1</td><td>Maths</td><td>10A</td><td>Smith</td><td>G12</td></tr>
  <tr><td></td><td>P2</td><td></td><td>10A</td><td>Smith</td><td>G12</td></tr>
  <tr><td></td><td>Recess</td><td>Yard duty</td><td></td><td></td><td></td></tr>
  <tr><td colspan="6" bgcolor="#cccccc">tuesday</td></tr>
  <tr><td></td><td>p3b</td><td>English</td><td>10EN</td><td>Lee</td><td>B4</td></tr>
  <tr><td>Week B</td></tr>
  <tr><td>Friday</td></tr>
  <tr><td></td><td>P4</td><td>Science</td><td>10SC</td><td>Who</td></tr>
  <tr><td></td><td>P5a</td><td>Art</td><td>10AR</td><td>Kahlo</td><td>A1</td></tr>
</table>
</body></html>
"""

NOTICES_HTML = """
<html><body>
<a class="help" title="Bring a hat and water bottle.">Sports Day</a>
<a class="help" title="">Empty tooltip</a>
<h4>Excursion</h4>
<div class="notice">Year 9 excursion to the <b>museum</b> on Friday.</div>
<h4>Sports Day</h4>
<p>This heading repeats the tooltip notice above.</p>
<h4>Short</h4>
<p>Too short</p>
</body></html>
"""

GRADES_HTML = """
<html><body>
<table><tr><td>Task</td><td>Result</td></tr><tr><td>Orphan task</td><td>A</td></tr></table>
<h3>Mathematics</h3>
<table>
  <tr><td>Task</td><td>Result</td></tr>
  <tr><td>Algebra test</td><td>Weighting 20%</td><td>A</td></tr>
  <tr><td>Year: 2024 summary</td><td>B</td></tr>
  <tr><td>ab</td><td>C</td></tr>
  <tr><td>Single cell</td></tr>
</table>
<h4>English</h4>
<table>
  <tr><td>Task</td><td>Mark</td></tr>
  <tr><td>Essay writing</td><td>18/20</td></tr>
</table>
</body></html>
"""

ATTENDANCE_HTML = """
<html><body>
<table class="table1sm">
  <tr class="title"><td>Year</td><td>School Days</td><td>Whole Day Absences</td>
      <td>%</td><td>Partial Absences</td><td>%</td></tr>
  <tr><td>2024</td><td>195</td><td>10</td><td>94.9%</td><td>2</td><td>93.1%</td></tr>
  <tr><td>Total</td><td>390</td><td>12</td><td>96%</td><td>3</td><td>95%</td></tr>
</table>
<table class="table1sm">
  <tr class="title"><td>Class</td><td>RollsMarked</td><td>Absent</td><td>Late</td><td>%</td></tr>
  <tr><td>10MA1</td><td>40</td><td>2</td><td>0</td><td>95%</td></tr>
  <tr><td>10EN1</td><td>0</td><td>0</td><td>0</td><td>-</td></tr>
  <tr><td>X</td><td>1</td><td>0</td><td>0</td><td>100%</td></tr>
  <tr><td>10SC1</td><td>12</td><td>1</td></tr>
</table>
</body></html>
"""

ATTENDANCE_FALLBACK_HTML = """
<html><body>
<table>
  <tr><td>Year</td><td>School Days</td><td>Absences</td><td>%</td><td>Partial</td><td>%</td></tr>
  <tr><td>2023</td><td>190</td><td>bad</td><td>n/a</td><td>1.5</td><td>97.0%</td></tr>
</table>
</body></html>
"""

REPORTS_HTML = """
<html><body>
<a href="viewreport.asp?id=1&amp;year=2024&amp;s=2">Year 10 - Semester 2 Report - 2024</a>
<a href="viewreport.asp?id=2&amp;year=2025&amp;s=1">Semester Report</a>
<a href="viewreport.asp?id=3">Year 11 - Semester 2 Report - 2025</a>
<a href="viewreport.asp?id=4">Attachment</a>
<a href="other.asp">Year 11 Report</a>
</body></html>
"""

CLASSES_HTML = """
<html><body>
<table>
  <tr><th>Subject</th><th>Class</th><th>Teacher</th></tr>
  <tr><td>Maths</td><td>10A</td><td>Mr Smith</td></tr>
</table>
<table>
  <tr><th>Course</th><th>Class</th><th>Teacher</th><th>Lessons</th><th>Quick Merits</th>
      <th>Rolls Marked</th><th>Absences</th><th>Room</th></tr>
  <tr><td>English</td><td>10EN1</td><td>Ms Lee</td><td>40</td><td>3</td><td>38</td><td>2</td><td>B4</td></tr>
  <tr><td>Science</td><td></td><td>Dr Who</td><td>n/a</td><td></td><td>12</td><td>1</td><td>L1</td></tr>
  <tr><td>PE</td><td>10PE</td><td>Coach</td><td>1</td><td>0</td><td>1</td><td>0</td><td>Gym</td></tr>
  <tr><td>Total:</td><td></td><td></td><td>41</td><td>3</td><td>51</td><td>3</td><td></td></tr>
</table>
<table>
  <tr><td>Your classes</td><td>Teacher</td></tr>
  <tr><td>History</td><td>Mr Hill</td></tr>
</table>
</body></html>
"""

CALENDAR_HTML = """
<html><body>
<a class="eventitem" data="evt-1">Athletics Carnival</a>
<a data="evt-2">--</a>
<a data="evt-3">Parent Evening</a>
<table>
  <tr><td>14 Apr Holidays -- Easter Break --</td></tr>
  <tr><td>21 Apr Event</td></tr>
  <tr><td>Staff only</td></tr>
</table>
</body></html>
"""

LOGIN_HTML = """
<html><body><form action="login.asp">
<input type="text" name="username"><input type="password" name="password">
</form></body></html>
"""


@pytest.fixture
def doc() -> Callable[[str], Node]:
    """Parse an HTML sample into a document node."""
    return parse_html


@pytest.fixture
def reference_day() -> date:
    return date(2025, 3, 15)


# ─────────────────────────────────────────────────────────────────────────────
# Configuration Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def config() -> PortalConfig:
    """Crawl configuration with no pacing delay."""
    return PortalConfig(base_url=BASE_URL, uid="", page_delay_seconds=0)


# ─────────────────────────────────────────────────────────────────────────────
# Network Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeFetcher:
    """In-memory PageFetcher: serves pages by URL and records every request.

    A page value that is an exception instance is raised instead of returned.
    Unknown URLs get an empty page.
    """

    def __init__(self, pages: dict[str, str | Exception] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self.pages.get(url, "<html><body></body></html>")
        if isinstance(page, Exception):
            raise page
        return page


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", payload=None) -> None:
        self.status_code = status_code
        self.text = text
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Stand-in for requests.Session returning queued responses in order."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests: list[dict] = []

    def _next(self):
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, timeout=None):
        self.requests.append({"method": "GET", "url": url, "timeout": timeout})
        return self._next()

    def post(self, url, json=None, timeout=None):
        self.requests.append(
            {"method": "POST", "url": url, "json": json, "timeout": timeout}
        )
        return self._next()

    def close(self) -> None:
        pass
