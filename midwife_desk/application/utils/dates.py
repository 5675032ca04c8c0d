from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from midwife_desk.domain.entities.timetable import WEEKDAYS

MINUTES_PER_DAY = 24 * 60

_DMY_PATTERN = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
_HHMM_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_dmy(value: str | None) -> date | None:
    """Parse a dd/mm/yyyy string. Returns None for missing or invalid input."""
    if not value:
        return None
    match = _DMY_PATTERN.match(value)
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def to_dmy(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def month_key(day: date) -> str:
    """Bucket key used by the monthly view, e.g. "3/2026" (month not zero padded)."""
    return f"{day.month}/{day.year}"


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def month_dates(year: int, month: int) -> list[date]:
    _, days_in_month = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, days_in_month + 1)]


def parse_hhmm(value: str | None) -> int | None:
    """Parse HH:MM into minutes since midnight. Returns None if unparseable."""
    if not value:
        return None
    match = _HHMM_PATTERN.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours * 60 + minutes


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def calculate_end_time(start_time: str, duration_minutes: int) -> str:
    """Add a duration to an HH:MM start, wrapping past midnight."""
    start = parse_hhmm(start_time)
    if start is None:
        raise ValueError(f"Invalid start time: {start_time!r}")
    return format_minutes((start + duration_minutes) % MINUTES_PER_DAY)


def split_slot(selected_slot: str | None) -> tuple[str, str]:
    """Split "HH:MM-HH:MM" into (start, end); missing parts come back empty."""
    parts = (selected_slot or "").split("-", 1)
    start = parts[0].strip() if parts else ""
    end = parts[1].strip() if len(parts) > 1 else ""
    return start, end


def today_in(timezone: str) -> date:
    return now_in(timezone).date()


def now_in(timezone: str) -> datetime:
    return datetime.now(_safe_timezone(timezone))


def _safe_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")
