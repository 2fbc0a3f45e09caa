"""Fold per-page results into the crawl's AggregateRecord.

Most pages are fetched once and simply replace their section. Notices and
calendar events arrive from many overlapping pages and are reconciled:

- a notice is identified by ``title::content`` (``title::preview`` when it
  has no content); repeats union their ``dates`` and keep the earliest
  ``date`` as primary.
- a calendar event is identified by ``(title, date)``; repeats are dropped.
"""

from collections.abc import Callable
from typing import Any

from portal_sync.models import (
    AggregateRecord,
    Attendance,
    CalendarEvent,
    ClassInfo,
    Dashboard,
    Grade,
    Notice,
    PageType,
    Report,
    Timetable,
)


def notice_identity_key(notice: Notice) -> str:
    return f"{notice.title}::{notice.content or notice.preview}"


def _ordered_union(*groups: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for group in groups:
        for value in group:
            if value:
                seen.setdefault(value, None)
    return list(seen)


def merge_notice(existing: Notice, incoming: Notice) -> None:
    """Fold a repeat sighting of a notice into the one already recorded."""
    existing.dates = _ordered_union(
        existing.dates, [existing.date], incoming.dates, [incoming.date]
    )
    # ISO dates order chronologically as strings
    existing.date = min(existing.date, incoming.date)


def merge_notices(notices: list[Notice], incoming: list[Notice]) -> list[Notice]:
    """Merge ``incoming`` into ``notices`` in place; returns ``notices``."""
    by_key = {notice_identity_key(n): n for n in notices}
    for notice in incoming:
        key = notice_identity_key(notice)
        if key in by_key:
            merge_notice(by_key[key], notice)
        else:
            notices.append(notice)
            by_key[key] = notice
    return notices


def merge_calendar(
    events: list[CalendarEvent], incoming: list[CalendarEvent]
) -> list[CalendarEvent]:
    """Append events not already present by (title, date); returns ``events``."""
    seen = {e.identity for e in events}
    for event in incoming:
        if event.identity not in seen:
            events.append(event)
            seen.add(event.identity)
    return events


def _fold_timetable(record: AggregateRecord, result: Timetable) -> None:
    record.timetable = result


def _fold_notices(record: AggregateRecord, result: list[Notice]) -> None:
    merge_notices(record.notices, result)


def _fold_grades(record: AggregateRecord, result: list[Grade]) -> None:
    record.grades = result


def _fold_attendance(record: AggregateRecord, result: Attendance) -> None:
    if not result.is_empty():
        record.attendance = result


def _fold_reports(record: AggregateRecord, result: list[Report]) -> None:
    record.reports = result


def _fold_classes(record: AggregateRecord, result: list[ClassInfo]) -> None:
    # Two classes.asp variants are fetched; an empty one must not wipe the other
    if result:
        record.classes = result


def _fold_calendar(record: AggregateRecord, result: list[CalendarEvent]) -> None:
    merge_calendar(record.calendar, result)


def _fold_dashboard(record: AggregateRecord, result: Dashboard) -> None:
    record.dashboard = result


FOLDERS: dict[str, Callable[[AggregateRecord, Any], None]] = {
    "dashboard": _fold_dashboard,
    "timetable": _fold_timetable,
    "notices": _fold_notices,
    "grades": _fold_grades,
    "attendance": _fold_attendance,
    "reports": _fold_reports,
    "classes": _fold_classes,
    "calendar": _fold_calendar,
}


def fold_page(record: AggregateRecord, page_type: PageType, result: Any) -> None:
    """Fold one page's scraped result into ``record`` in place."""
    FOLDERS[page_type](record, result)
