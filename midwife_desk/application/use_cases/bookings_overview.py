from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Generic, Iterable, TypeVar
from zoneinfo import ZoneInfo

from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.utils.dates import parse_dmy, parse_hhmm, split_slot
from midwife_desk.domain.entities.bookings import Lead, PhoneBooking, PrivateServiceBooking

PLACEHOLDER = "—"

T = TypeVar("T")


@dataclass(frozen=True)
class Partition(Generic[T]):
    upcoming: list[T] = field(default_factory=list)
    past: list[T] = field(default_factory=list)
    cancelled: list[T] = field(default_factory=list)


def lead_address(lead: Lead) -> str:
    return (lead.address or "").strip() or PLACEHOLDER


def private_full_name(booking: PrivateServiceBooking) -> str:
    return f"{booking.first_name or ''} {booking.last_name or ''}".strip() or PLACEHOLDER


def private_schedule(booking: PrivateServiceBooking) -> tuple[str | None, str | None]:
    """Effective (date, "HH:MM-HH:MM") of a booking; courses use their first session."""
    if booking.is_course:
        first = min(booking.course_sessions, key=lambda session: session.session_number)
        return first.date, f"{first.start_time}-{first.end_time}"
    return booking.selected_date, booking.selected_slot


def _slot_start(slot: str | None) -> int:
    start = parse_hhmm(split_slot(slot)[0])
    return start if start is not None else 0


def partition_leads(leads: Iterable[Lead], today: date) -> Partition[Lead]:
    """Upcoming (today or later) and past leads, both ascending. Undated leads are dropped."""
    dated = []
    for lead in leads:
        day = parse_dmy(lead.date)
        if day is not None:
            dated.append((day, _slot_start(lead.selected_slot), lead))
    dated.sort(key=lambda item: item[:2])
    return Partition(
        upcoming=[lead for day, _, lead in dated if day >= today],
        past=[lead for day, _, lead in dated if day < today],
    )


def _is_cancelled(status: str | None) -> bool:
    return (status or "").lower() == "cancelled"


def _partition_by_status(live: list[tuple[date, int, T]], cancelled: list[T], today: date) -> Partition[T]:
    live.sort(key=lambda item: item[:2])
    return Partition(
        upcoming=[booking for day, _, booking in live if day >= today],
        past=[booking for day, _, booking in reversed(live) if day < today],
        cancelled=cancelled,
    )


def partition_phone_bookings(bookings: Iterable[PhoneBooking], today: date) -> Partition[PhoneBooking]:
    """
    Cancelled bookings are listed apart in API order, dated or not; the rest
    split into upcoming (ascending) and past (newest first).
    """
    live, cancelled = [], []
    for booking in bookings:
        if _is_cancelled(booking.status):
            cancelled.append(booking)
            continue
        day = parse_dmy(booking.date)
        if day is not None:
            live.append((day, _slot_start(booking.selected_slot), booking))
    return _partition_by_status(live, cancelled, today)


def partition_private_bookings(
    bookings: Iterable[PrivateServiceBooking], today: date
) -> Partition[PrivateServiceBooking]:
    live, cancelled = [], []
    for booking in bookings:
        if _is_cancelled(booking.status):
            cancelled.append(booking)
            continue
        booking_date, slot = private_schedule(booking)
        day = parse_dmy(booking_date)
        if day is not None:
            live.append((day, _slot_start(slot), booking))
    return _partition_by_status(live, cancelled, today)


class BookingsOverviewUseCase:
    def __init__(self, api: MidwifeApiPort, timezone: ZoneInfo) -> None:
        self._api = api
        self._timezone = timezone

    def _today(self, today: date | None) -> date:
        return today or datetime.now(self._timezone).date()

    def leads(self, midwife_id: str, today: date | None = None) -> Partition[Lead]:
        return partition_leads(self._api.list_leads(midwife_id), self._today(today))

    def phone_bookings(self, midwife_id: str, today: date | None = None) -> Partition[PhoneBooking]:
        return partition_phone_bookings(self._api.list_phone_bookings(midwife_id), self._today(today))

    def private_bookings(self, midwife_id: str, today: date | None = None) -> Partition[PrivateServiceBooking]:
        return partition_private_bookings(self._api.list_private_bookings(midwife_id), self._today(today))
