from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.utils.dates import parse_dmy, parse_hhmm, to_dmy
from midwife_desk.domain.entities.appointment import STATUSES, Appointment

STATUS_FILTER_ALL = "all"
STATUS_FILTERS = (STATUS_FILTER_ALL, *STATUSES)


@dataclass(frozen=True)
class DaySection:
    day: str  # dd/mm/yyyy
    appointments: list[Appointment]


@dataclass(frozen=True)
class PatientMonthView:
    year: int
    month: int
    status: str
    counts: dict[str, int]
    sections: list[DaySection] = field(default_factory=list)


def _sort_key(apt: Appointment) -> tuple[date, int]:
    start = parse_hhmm(apt.start_time)
    return parse_dmy(apt.appointment_date) or date.max, start if start is not None else 24 * 60


def sort_appointments(appointments: Iterable[Appointment]) -> list[Appointment]:
    """Date first, then start time. Unparseable dates sort last."""
    return sorted(appointments, key=_sort_key)


def in_month(appointments: Iterable[Appointment], year: int, month: int) -> list[Appointment]:
    result = []
    for apt in appointments:
        day = parse_dmy(apt.appointment_date)
        if day is not None and day.year == year and day.month == month:
            result.append(apt)
    return result


def filter_by_status(appointments: Iterable[Appointment], status: str) -> list[Appointment]:
    status = (status or STATUS_FILTER_ALL).strip().lower()
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status}")
    if status == STATUS_FILTER_ALL:
        return list(appointments)
    return [apt for apt in appointments if apt.normalized_status == status]


def status_counts(appointments: Iterable[Appointment]) -> dict[str, int]:
    counts = {key: 0 for key in STATUS_FILTERS}
    for apt in appointments:
        counts[STATUS_FILTER_ALL] += 1
        if apt.normalized_status in counts:
            counts[apt.normalized_status] += 1
    return counts


def group_by_day(appointments: Iterable[Appointment]) -> list[DaySection]:
    sections: dict[date, list[Appointment]] = {}
    for apt in sort_appointments(appointments):
        day = parse_dmy(apt.appointment_date)
        if day is not None:
            sections.setdefault(day, []).append(apt)
    return [DaySection(day=to_dmy(day), appointments=apts) for day, apts in sorted(sections.items())]


class PatientAppointmentsUseCase:
    def __init__(self, api: MidwifeApiPort) -> None:
        self._api = api

    def list_for_client(self, midwife_id: str, client_id: str) -> list[Appointment]:
        """Pre- and post-birth appointments of one client, in chronological order."""
        return sort_appointments(self._api.client_appointments(midwife_id, client_id))

    def month_view(
        self,
        midwife_id: str,
        client_id: str,
        year: int,
        month: int,
        status: str = STATUS_FILTER_ALL,
    ) -> PatientMonthView:
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")
        monthly = in_month(self.list_for_client(midwife_id, client_id), year, month)
        return PatientMonthView(
            year=year,
            month=month,
            status=status,
            counts=status_counts(monthly),
            sections=group_by_day(filter_by_status(monthly, status)),
        )
