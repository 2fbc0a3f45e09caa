"""Pydantic models for portal data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Fields are snake_case in Python and camelCase on the wire (the sync endpoint
expects ``weekA``, ``classCode``, ``lastUpdated`` and so on).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

PageType = Literal[
    "dashboard",
    "timetable",
    "notices",
    "grades",
    "attendance",
    "reports",
    "classes",
    "calendar",
]

AttendanceStatus = Literal["present", "absent", "partial", "unmarked"]


class PortalModel(BaseModel):
    """Base model: camelCase aliases, population by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"


class TimetableEntry(PortalModel):
    """One lesson slot in the fortnightly (Week A / Week B) timetable."""

    day: Weekday
    period: str = Field(pattern=r"(?i)^P\d+[ab]?$")  # "P1", "P3b"
    course: str = Field(min_length=1)
    class_code: str = ""  # "10A"
    teacher: str = ""
    room: str = ""


class Timetable(PortalModel):
    week_a: list[TimetableEntry] = Field(default_factory=list)
    week_b: list[TimetableEntry] = Field(default_factory=list)


class Notice(PortalModel):
    """A school notice as seen on one or more date-filtered notice pages.

    ``date`` is the earliest date the notice was seen on; ``dates`` keeps
    every date it was seen on, in first-seen order.
    """

    title: str
    content: str
    content_html: str = ""
    preview: str = ""
    date: str  # YYYY-MM-DD
    current_day: str  # YYYY-MM-DD, the day the crawl ran
    dates: list[str] = Field(default_factory=list)


class Grade(PortalModel):
    subject: str
    task: str = Field(min_length=3, max_length=99)
    result: str = ""
    date: str = ""


class AttendanceYearly(PortalModel):
    """One row of the official school attendance table."""

    year: str = Field(pattern=r"^20\d{2}$")
    school_days: int = 0
    whole_day_absences: int = 0
    whole_day_percentage: float = 0.0
    partial_absences: float = 0.0
    total_percentage: float = 0.0


class AttendanceSubject(PortalModel):
    """One row of the whole-period statistics table."""

    class_code: str
    rolls_marked: int = 0
    absent: int = 0
    percentage: float | None = None  # None when the portal shows "-"


class Attendance(PortalModel):
    yearly: list[AttendanceYearly] = Field(default_factory=list)
    subjects: list[AttendanceSubject] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.yearly and not self.subjects


class Report(PortalModel):
    title: str
    url: str
    year_level: str = ""  # "Year 11"
    semester: int = 0  # 1 or 2, 0 when unknown
    calendar_year: int = 0  # 2025, 0 when unknown


class ClassInfo(PortalModel):
    course: str = Field(min_length=3)
    class_code: str
    teacher: str = ""
    room: str = ""
    lessons: int = 0
    quick_merits: int = 0
    rolls_marked: int = 0
    absences: int = 0


class CalendarEvent(PortalModel):
    """A calendar entry: either an event link (title + data) or a holiday cell.

    Unset fields are left out of the serialized form.
    """

    title: str
    data: str | None = None
    date: str | None = None  # "15 Mar" fragment for holiday cells
    type: Literal["holiday"] | None = None

    @model_serializer(mode="wrap")
    def _drop_unset(self, handler):
        return {k: v for k, v in handler(self).items() if v is not None}

    @property
    def identity(self) -> tuple[str, str | None]:
        return (self.title, self.date)


class UserInfo(PortalModel):
    school: str = ""
    name: str = ""
    uid: str | None = None


class DashboardLesson(PortalModel):
    """Today's lesson from the landing page timetable widget."""

    period: str
    room: str = ""
    subject: str
    teacher: str
    attendance_status: AttendanceStatus = "unmarked"


class DiaryEntry(PortalModel):
    date: str  # "Thu 4 SEP"
    title: str
    description: str | None = None


class Dashboard(PortalModel):
    today: list[DashboardLesson] = Field(default_factory=list)
    diary: list[DiaryEntry] = Field(default_factory=list)


class PageDescriptor(PortalModel):
    """One page of the crawl plan."""

    name: str  # "Calendar (Month 3)", "Notices (-2d)"
    url: str
    type: PageType


class CrawlProgress(PortalModel):
    current: int  # 1-based
    total: int
    page: str


class PageOutcome(PortalModel):
    """What happened to one page of the crawl."""

    name: str
    url: str
    type: PageType
    ok: bool
    error: str | None = None


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class AggregateRecord(PortalModel):
    """Everything one crawl collected.

    Created fresh per crawl, filled in place as pages complete, then handed
    to the sync endpoint.
    """

    user: UserInfo = Field(default_factory=UserInfo)
    timetable: Timetable = Field(default_factory=Timetable)
    notices: list[Notice] = Field(default_factory=list)
    grades: list[Grade] = Field(default_factory=list)
    attendance: Attendance = Field(default_factory=Attendance)
    reports: list[Report] = Field(default_factory=list)
    calendar: list[CalendarEvent] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    dashboard: Dashboard = Field(default_factory=Dashboard)
    last_updated: str = Field(default_factory=_utc_now_iso)


class CrawlResult(PortalModel):
    record: AggregateRecord
    outcomes: list[PageOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> list[PageOutcome]:
        return [o for o in self.outcomes if not o.ok]
