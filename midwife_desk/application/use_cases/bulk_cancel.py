from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from midwife_desk.application.exceptions import SchedulingValidationError
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.use_cases.patient_appointments import sort_appointments
from midwife_desk.application.utils.availability import appointments_on
from midwife_desk.application.utils.dates import parse_dmy, to_dmy
from midwife_desk.domain.entities.appointment import Appointment


def dates_with_appointments(appointments: Iterable[Appointment], today: date) -> list[str]:
    """Today or later dates holding at least one non-cancelled appointment, ascending."""
    days = set()
    for apt in appointments:
        day = parse_dmy(apt.appointment_date)
        if day is not None and day >= today and not apt.is_cancelled:
            days.add(day)
    return [to_dmy(day) for day in sorted(days)]


class BulkCancelUseCase:
    def __init__(self, api: MidwifeApiPort, timezone: ZoneInfo) -> None:
        self._api = api
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def _appointments(self, midwife_id: str, now: datetime) -> list[Appointment]:
        months = self._api.monthly_view(midwife_id, now)
        return [apt for appointments in months.values() for apt in appointments]

    def cancellable_dates(self, midwife_id: str, now: datetime | None = None) -> list[str]:
        now = now or datetime.now(self._timezone)
        return dates_with_appointments(self._appointments(midwife_id, now), now.date())

    def appointments_on(self, midwife_id: str, day: date, now: datetime | None = None) -> list[Appointment]:
        now = now or datetime.now(self._timezone)
        active = [apt for apt in appointments_on(self._appointments(midwife_id, now), day) if not apt.is_cancelled]
        return sort_appointments(active)

    def execute(self, midwife_id: str, day: date, now: datetime | None = None) -> str:
        """
        Cancel every appointment of a date. For today only appointments from
        the current time onward are cancelled.
        """
        now = now or datetime.now(self._timezone)
        if day < now.date():
            raise SchedulingValidationError("Cannot cancel appointments in the past")
        if not self.appointments_on(midwife_id, day, now):
            raise SchedulingValidationError(f"No appointments to cancel on {to_dmy(day)}")

        from_time = now.strftime("%H:%M") if day == now.date() else None
        message = self._api.bulk_cancel(midwife_id, to_dmy(day), from_time)
        self._logger.info(
            "Bulk cancel sent",
            extra={"midwife_id": midwife_id, "reason": f"{to_dmy(day)} from {from_time or 'start of day'}"},
        )
        return message
