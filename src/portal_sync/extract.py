"""Field extractors: pull one normalized value out of raw portal text.

None of these raise on malformed input. Numbers default to 0 and dates
default to the current date, matching how the portal pages are read.
"""

import re
from datetime import date, datetime
from urllib.parse import quote, unquote

from dateutil.parser import ParserError
from dateutil.parser import parse as parse_date

MONTHS: tuple[str, ...] = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

PERIOD_RE = re.compile(r"^P\d+[ab]?$", re.IGNORECASE)
YEAR_RE = re.compile(r"^20\d{2}$")

PREVIEW_LENGTH = 200

_NOTICE_DATE_RE = re.compile(r"(\d{1,2})\s+([A-Za-z]{3})\s+(\d{4})")
_DECIMAL_RE = re.compile(r"\d*\.\d+|\d+")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_notice_date_param(value: str | None) -> date | None:
    """Decode a notice ``date`` query parameter such as ``15%20Mar%202025``.

    Tries the portal's ``D MMM YYYY`` form first, then generic date parsing.

    Returns:
        The calendar date, or None when neither form parses. Callers treat
        None as "use the current date".
    """
    if not value:
        return None
    decoded = unquote(value).strip()
    if not decoded:
        return None

    match = _NOTICE_DATE_RE.search(decoded)
    if match:
        label = match.group(2).upper()
        if label in MONTHS:
            try:
                return date(int(match.group(3)), MONTHS.index(label) + 1, int(match.group(1)))
            except ValueError:
                pass  # "31 FEB 2025": let the generic parser have a go

    try:
        return parse_date(decoded).date()
    except (ParserError, ValueError, OverflowError):
        return None


def format_notice_date(value: date | datetime | str | None) -> str:
    """Render a date-like value as ``YYYY-MM-DD``; unusable input gives today."""
    if value is None:
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    parsed = parse_notice_date_param(value)
    return (parsed or date.today()).isoformat()


def encode_notice_date(day: date) -> str:
    """URL-encoded ``D MMM YYYY`` with an upper-case month, e.g. ``5%20MAR%202025``."""
    return quote(f"{day.day} {MONTHS[day.month - 1]} {day.year}")


def parse_percent(text: str | None) -> float:
    """First decimal number in ``text`` ("94.9%" -> 94.9), or 0."""
    match = _DECIMAL_RE.search(text or "")
    return float(match.group(0)) if match else 0.0


def parse_optional_percent(text: str | None) -> float | None:
    """Like parse_percent, but None when there is no number ("-")."""
    match = _DECIMAL_RE.search(text or "")
    return float(match.group(0)) if match else None


def parse_int(text: str | None) -> int:
    """Leading integer of ``text`` ("12 lessons" -> 12), or 0."""
    match = _LEADING_INT_RE.match(text or "")
    return int(match.group(1)) if match else 0


def parse_float(text: str | None) -> float:
    """Leading decimal of ``text`` ("2.5" -> 2.5), or 0."""
    match = _LEADING_FLOAT_RE.match(text or "")
    return float(match.group(1)) if match else 0.0


def make_preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content
