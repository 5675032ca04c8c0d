"""
Tests for valid dates, slot availability, free ranges and custom time options.
"""

from __future__ import annotations

from datetime import date

import pytest

from midwife_desk.application.exceptions import SchedulingValidationError
from midwife_desk.application.utils.availability import (
    TimeRange,
    available_slots,
    filter_time_options,
    find_free_time_ranges,
    is_slot_occupied,
    parse_time_range,
    valid_dates_for_month,
    validate_custom_time,
)
from midwife_desk.domain.entities.appointment import Appointment
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable

# 2026-03-02 is a Monday
MONDAY = date(2026, 3, 2)


def _timetable() -> Timetable:
    return Timetable(
        days={
            "Monday": {
                "B2": (TimeSlot("09:00", "09:50"), TimeSlot("10:00", "10:50")),
                "B1": (TimeSlot("14:00", "15:00"),),
            },
            "Wednesday": {"C1": (TimeSlot("11:00", "12:00"),), "B2": ()},
        }
    )


def _apt(apt_id: str, day: str, start: str, end: str, status: str | None = "active") -> Appointment:
    return Appointment(
        appointment_id=apt_id,
        service_code="B2",
        appointment_date=day,
        start_time=start,
        end_time=end,
        status=status,
    )


def test_valid_dates_only_weekdays_with_slots():
    dates = valid_dates_for_month(_timetable(), "B2", 2026, 3, today=date(2026, 3, 1))

    assert dates == {"02/03/2026", "09/03/2026", "16/03/2026", "23/03/2026", "30/03/2026"}


def test_valid_dates_exclude_past_days():
    dates = valid_dates_for_month(_timetable(), "B2", 2026, 3, today=date(2026, 3, 10))

    assert "02/03/2026" not in dates
    assert "09/03/2026" not in dates
    assert "16/03/2026" in dates


def test_valid_dates_today_is_valid():
    dates = valid_dates_for_month(_timetable(), "B2", 2026, 3, today=MONDAY)

    assert "02/03/2026" in dates


def test_empty_slot_list_is_not_valid():
    # Wednesday has a B2 entry, but no slots in it
    dates = valid_dates_for_month(_timetable(), "B2", 2026, 3, today=date(2026, 3, 1))

    assert "04/03/2026" not in dates


def test_valid_dates_without_timetable():
    assert valid_dates_for_month(None, "B2", 2026, 3, today=date(2026, 3, 1)) == set()


def test_booked_slot_is_removed():
    appointments = [_apt("a1", "02/03/2026", "09:00", "09:50")]

    slots = available_slots(_timetable(), "B2", MONDAY, appointments)

    assert slots == [TimeSlot("10:00", "10:50")]


def test_cancelled_appointment_keeps_slot_free():
    appointments = [_apt("a1", "02/03/2026", "09:00", "09:50", status="Cancelled")]

    slots = available_slots(_timetable(), "B2", MONDAY, appointments)

    assert slots == [TimeSlot("09:00", "09:50"), TimeSlot("10:00", "10:50")]


def test_appointment_on_other_date_does_not_block():
    appointments = [_apt("a1", "09/03/2026", "09:00", "09:50")]

    assert len(available_slots(_timetable(), "B2", MONDAY, appointments)) == 2


def test_rescheduled_appointment_does_not_block_itself():
    appointments = [_apt("a1", "02/03/2026", "09:00", "09:50")]

    slots = available_slots(_timetable(), "B2", MONDAY, appointments, exclude_appointment_id="a1")

    assert TimeSlot("09:00", "09:50") in slots


def test_partial_overlap_only_blocks_with_overlap_check():
    appointments = [_apt("a1", "02/03/2026", "09:30", "10:15")]

    exact = available_slots(_timetable(), "B2", MONDAY, appointments)
    overlap = available_slots(_timetable(), "B2", MONDAY, appointments, detect_overlaps=True)

    assert len(exact) == 2
    assert overlap == []


def test_slot_match_ignores_zero_padding():
    appointments = [_apt("a1", "2/3/2026", "9:00", "09:50")]

    assert is_slot_occupied(appointments, MONDAY, "09:00", "09:50")


def test_free_ranges_merge_busy_intervals():
    appointments = [
        _apt("a1", "02/03/2026", "10:30", "11:30"),
        _apt("a2", "02/03/2026", "16:00", "17:00", status="cancelled"),
    ]

    ranges = find_free_time_ranges(_timetable(), MONDAY, appointments)

    assert [r.label for r in ranges] == ["00:00 - 09:00", "09:50 - 10:00", "11:30 - 14:00", "15:00 - 23:59"]


def test_free_ranges_without_timetable_cover_the_day():
    ranges = find_free_time_ranges(None, MONDAY, [])

    assert ranges == [TimeRange(0, 23 * 60 + 59)]


def test_parse_time_range_accepts_suffix():
    assert parse_time_range("09:00 - 12:00 available") == TimeRange(540, 720)
    assert parse_time_range("9:00-12:00") == TimeRange(540, 720)
    assert parse_time_range("nonsense") is None
    assert parse_time_range("12:00-09:00") is None


def test_time_options_end_boundary_is_inclusive():
    assert filter_time_options(["09:00-10:00"], 50, step_minutes=15) == ["09:00"]

    options = filter_time_options(["09:00-10:00"], 50, step_minutes=5)

    assert "09:10" in options
    assert "09:15" not in options


def test_time_options_are_sorted_and_unique():
    options = filter_time_options(["10:00-11:00", "09:00-10:30", "garbage"], 30)

    assert options == ["09:00", "09:15", "09:30", "09:45", "10:00", "10:15", "10:30"]


def test_time_options_reject_bad_step():
    with pytest.raises(ValueError):
        filter_time_options(["09:00-10:00"], 30, step_minutes=0)


def test_custom_time_must_fit_a_free_range():
    ranges = [TimeRange(540, 600)]

    validate_custom_time("09:00", "09:50", ranges)

    with pytest.raises(SchedulingValidationError, match="not within"):
        validate_custom_time("09:30", "10:20", ranges)
    with pytest.raises(SchedulingValidationError, match="after the start"):
        validate_custom_time("09:30", "09:00", ranges)
    with pytest.raises(SchedulingValidationError, match="No free time"):
        validate_custom_time("09:00", "09:30", [])
