from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from midwife_desk.application.exceptions import SchedulingValidationError
from midwife_desk.application.utils.dates import (
    MINUTES_PER_DAY,
    format_minutes,
    month_dates,
    parse_dmy,
    parse_hhmm,
    to_dmy,
    weekday_name,
)
from midwife_desk.domain.entities.appointment import Appointment
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable

DAY_END_MINUTE = MINUTES_PER_DAY - 1  # 23:59

_RANGE_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})")


@dataclass(frozen=True)
class TimeRange:
    start: int  # minutes since midnight
    end: int

    @property
    def label(self) -> str:
        return f"{format_minutes(self.start)} - {format_minutes(self.end)}"

    def contains(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end


def is_date_bookable(timetable: Timetable | None, service_code: str, day: date, today: date) -> bool:
    """A date is bookable when it is not in the past and its weekday has slots for the service."""
    if timetable is None or day < today:
        return False
    return timetable.offers(weekday_name(day), service_code)


def valid_dates_for_month(
    timetable: Timetable | None,
    service_code: str,
    year: int,
    month: int,
    today: date,
) -> set[str]:
    """dd/mm/yyyy keys of every bookable date in the month."""
    return {
        to_dmy(day)
        for day in month_dates(year, month)
        if is_date_bookable(timetable, service_code, day, today)
    }


def appointments_on(appointments: Iterable[Appointment], day: date) -> list[Appointment]:
    return [apt for apt in appointments if parse_dmy(apt.appointment_date) == day]


def _blocking_appointments(
    appointments: Iterable[Appointment],
    day: date,
    exclude_appointment_id: str | None,
) -> list[Appointment]:
    return [
        apt
        for apt in appointments_on(appointments, day)
        if not apt.is_cancelled
        and (exclude_appointment_id is None or apt.appointment_id != exclude_appointment_id)
    ]


def _interval(start_time: str, end_time: str) -> tuple[int, int] | None:
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if start is None or end is None:
        return None
    return start, end


def _same_time_range(start_time: str, end_time: str, other_start: str, other_end: str) -> bool:
    """Times compare as minutes, so "9:00" and "09:00" are the same start."""
    if (start_time, end_time) == (other_start, other_end):
        return True
    slot = _interval(start_time, end_time)
    return slot is not None and slot == _interval(other_start, other_end)


def matches_slot(slot: TimeSlot, start_time: str, end_time: str) -> bool:
    return _same_time_range(slot.start_time, slot.end_time, start_time, end_time)


def _same_slot(start_time: str, end_time: str, apt: Appointment) -> bool:
    return _same_time_range(start_time, end_time, apt.start_time, apt.end_time)


def _overlaps(start_time: str, end_time: str, apt: Appointment) -> bool:
    slot = _interval(start_time, end_time)
    booked = _interval(apt.start_time, apt.end_time)
    if slot is None or booked is None:
        return False
    return slot[0] < booked[1] and booked[0] < slot[1]


def is_slot_occupied(
    appointments: Iterable[Appointment],
    day: date,
    start_time: str,
    end_time: str,
    exclude_appointment_id: str | None = None,
    detect_overlaps: bool = False,
) -> bool:
    for apt in _blocking_appointments(appointments, day, exclude_appointment_id):
        if _same_slot(start_time, end_time, apt):
            return True
        if detect_overlaps and _overlaps(start_time, end_time, apt):
            return True
    return False


def available_slots(
    timetable: Timetable | None,
    service_code: str,
    day: date,
    appointments: Iterable[Appointment],
    exclude_appointment_id: str | None = None,
    detect_overlaps: bool = False,
) -> list[TimeSlot]:
    """
    Timetable slots of the day's weekday for the service that no non-cancelled
    appointment on that date occupies.

    A slot is occupied when an appointment has the same start and end. With
    detect_overlaps, partial overlaps also occupy the slot.
    """
    if timetable is None:
        return []
    appointments = list(appointments)
    return [
        slot
        for slot in timetable.slots_for(weekday_name(day), service_code)
        if not is_slot_occupied(
            appointments,
            day,
            slot.start_time,
            slot.end_time,
            exclude_appointment_id=exclude_appointment_id,
            detect_overlaps=detect_overlaps,
        )
    ]


def is_timetable_slot(
    timetable: Timetable | None,
    service_code: str,
    day: date,
    start_time: str,
    end_time: str,
) -> bool:
    if timetable is None:
        return False
    return any(
        matches_slot(slot, start_time, end_time)
        for slot in timetable.slots_for(weekday_name(day), service_code)
    )


def find_free_time_ranges(
    timetable: Timetable | None,
    day: date,
    appointments: Iterable[Appointment],
) -> list[TimeRange]:
    """
    Free windows of a day between 00:00 and 23:59.

    Busy time is every timetable slot of the weekday (all services) plus every
    non-cancelled appointment on the date. Without a timetable the whole day is free.
    """
    if timetable is None:
        return [TimeRange(0, DAY_END_MINUTE)]

    busy: list[tuple[int, int]] = []
    for slot in timetable.slots_on(weekday_name(day)):
        interval = _interval(slot.start_time, slot.end_time)
        if interval and interval[0] < interval[1]:
            busy.append(interval)
    for apt in _blocking_appointments(appointments, day, None):
        interval = _interval(apt.start_time, apt.end_time)
        if interval and interval[0] < interval[1]:
            busy.append(interval)

    merged: list[list[int]] = []
    for start, end in sorted(busy):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    free: list[TimeRange] = []
    current = 0
    for start, end in merged:
        if current < start:
            free.append(TimeRange(current, start))
        current = max(current, end)
    if current < DAY_END_MINUTE:
        free.append(TimeRange(current, DAY_END_MINUTE))
    return free


def parse_time_range(text: str) -> TimeRange | None:
    """Parse "HH:MM-HH:MM" (optionally spaced or suffixed, e.g. "09:00 - 12:00 available")."""
    match = _RANGE_PATTERN.search(text or "")
    if not match:
        return None
    start = parse_hhmm(f"{match.group(1)}:{match.group(2)}")
    end = parse_hhmm(f"{match.group(3)}:{match.group(4)}")
    if start is None or end is None or end <= start:
        return None
    return TimeRange(start, end)


def filter_time_options(
    ranges: Iterable[str | TimeRange],
    duration_minutes: int,
    step_minutes: int = 15,
) -> list[str]:
    """
    Start times on a fixed grid that fit the whole duration inside one range.

    The range end is inclusive: a start qualifies when start + duration <= end.
    Unparseable ranges are skipped.
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    parsed: list[TimeRange] = []
    for item in ranges:
        time_range = item if isinstance(item, TimeRange) else parse_time_range(item)
        if time_range is not None:
            parsed.append(time_range)

    options: set[int] = set()
    for minute in range(0, MINUTES_PER_DAY, step_minutes):
        if any(r.contains(minute, minute + duration_minutes) for r in parsed):
            options.add(minute)
    return [format_minutes(minute) for minute in sorted(options)]


def validate_custom_time(start_time: str, end_time: str, free_ranges: list[TimeRange]) -> None:
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if start is None or end is None:
        raise SchedulingValidationError("Invalid time, expected HH:MM")
    if end <= start:
        raise SchedulingValidationError("End time must be after the start time")
    if not free_ranges:
        raise SchedulingValidationError("No free time available on this date")
    if not any(r.contains(start, end) for r in free_ranges):
        raise SchedulingValidationError("The selected time is not within the available time ranges")
