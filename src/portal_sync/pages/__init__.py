"""Page objects, one per portal page type."""

from portal_sync.pages.attendance import AttendancePage
from portal_sync.pages.calendar import CalendarPage
from portal_sync.pages.classes import ClassesPage
from portal_sync.pages.dashboard import DashboardPage
from portal_sync.pages.grades import GradesPage
from portal_sync.pages.notices import NoticesPage
from portal_sync.pages.reports import ReportsPage
from portal_sync.pages.timetable import TimetablePage

__all__ = [
    "AttendancePage",
    "CalendarPage",
    "ClassesPage",
    "DashboardPage",
    "GradesPage",
    "NoticesPage",
    "ReportsPage",
    "TimetablePage",
]
