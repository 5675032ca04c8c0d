from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

from midwife_desk.application.exceptions import NotFoundError, SchedulingValidationError
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.ports.service_catalog import ServiceCatalogPort
from midwife_desk.application.utils.availability import (
    TimeRange,
    available_slots,
    filter_time_options,
    find_free_time_ranges,
    is_date_bookable,
    matches_slot,
    valid_dates_for_month,
    validate_custom_time,
)
from midwife_desk.application.utils.dates import calculate_end_time, parse_dmy, parse_hhmm, to_dmy
from midwife_desk.domain.entities.appointment import Appointment
from midwife_desk.domain.entities.profile import MidwifeProfile
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable


class AppointmentSchedulingUseCase:
    """
    Creates, moves, cancels and reactivates appointments for one midwife.

    Every state change re-reads the midwife's profile and monthly view so the
    chosen date and slot are checked against fresh data before the API call.
    """

    def __init__(
        self,
        api: MidwifeApiPort,
        catalog: ServiceCatalogPort,
        timezone: ZoneInfo,
        step_minutes: int = 15,
        detect_overlaps: bool = False,
    ) -> None:
        self._api = api
        self._catalog = catalog
        self._timezone = timezone
        self._step_minutes = step_minutes
        self._detect_overlaps = detect_overlaps
        self._logger = logging.getLogger(__name__)

    def now(self) -> datetime:
        return datetime.now(self._timezone)

    def today(self) -> date:
        return self.now().date()

    # Reads

    def load_profile(self, midwife_id: str) -> MidwifeProfile:
        """The profile, with catalog titles filled in for timetable codes the profile leaves untitled."""
        profile = self._api.get_profile(midwife_id)
        titles = dict(profile.service_titles)
        if profile.timetable is not None:
            for services in profile.timetable.days.values():
                for code in services:
                    entry = self._catalog.get_service(code)
                    if code not in titles and entry is not None:
                        titles[code] = entry.title
        return replace(profile, service_titles=titles)

    def load_timetable(self, midwife_id: str) -> Timetable | None:
        return self._api.get_profile(midwife_id).timetable

    def midwife_appointments(self, midwife_id: str) -> list[Appointment]:
        """Every appointment of the midwife, flattened from the monthly view."""
        months = self._api.monthly_view(midwife_id, self.now())
        return [apt for appointments in months.values() for apt in appointments]

    def find_appointment(self, midwife_id: str, appointment_id: str) -> Appointment:
        for apt in self.midwife_appointments(midwife_id):
            if apt.appointment_id == appointment_id:
                return apt
        raise NotFoundError(f"Appointment {appointment_id} not found")

    def valid_dates(
        self,
        midwife_id: str,
        service_code: str,
        year: int,
        month: int,
        today: date | None = None,
    ) -> list[str]:
        keys = valid_dates_for_month(
            self.load_timetable(midwife_id), service_code, year, month, today or self.today()
        )
        return sorted(keys, key=parse_dmy)

    def available_slots(
        self,
        midwife_id: str,
        service_code: str,
        day: date,
        exclude_appointment_id: str | None = None,
    ) -> list[TimeSlot]:
        return available_slots(
            self.load_timetable(midwife_id),
            service_code,
            day,
            self.midwife_appointments(midwife_id),
            exclude_appointment_id=exclude_appointment_id,
            detect_overlaps=self._detect_overlaps,
        )

    def free_time_ranges(
        self,
        midwife_id: str,
        day: date,
        exclude_appointment_id: str | None = None,
    ) -> list[TimeRange]:
        appointments = [
            apt
            for apt in self.midwife_appointments(midwife_id)
            if apt.appointment_id != exclude_appointment_id
        ]
        return find_free_time_ranges(self.load_timetable(midwife_id), day, appointments)

    def custom_time_options(
        self,
        midwife_id: str,
        service_code: str,
        day: date,
        exclude_appointment_id: str | None = None,
    ) -> list[str]:
        ranges = self.free_time_ranges(midwife_id, day, exclude_appointment_id)
        return filter_time_options(ranges, self._catalog.get_duration_minutes(service_code), self._step_minutes)

    # Writes

    def create(
        self,
        midwife_id: str,
        client_id: str,
        service_code: str,
        day: date,
        start_time: str,
        end_time: str | None = None,
        custom: bool = False,
    ) -> str:
        if service_code not in self._catalog.bookable_codes():
            raise SchedulingValidationError(f"Service {service_code} cannot be booked from the desk")
        if not client_id:
            raise SchedulingValidationError("A client is required")

        start_time, end_time = self._resolve_time(midwife_id, service_code, day, start_time, end_time, custom)
        message = self._api.create_appointment(
            midwife_id, client_id, service_code, to_dmy(day), start_time, end_time
        )
        self._logger.info(
            "Appointment created",
            extra={"midwife_id": midwife_id, "service_code": service_code, "reason": f"{to_dmy(day)} {start_time}"},
        )
        return message

    def edit(
        self,
        midwife_id: str,
        appointment_id: str,
        day: date,
        start_time: str,
        end_time: str | None = None,
        custom: bool = False,
    ) -> str:
        appointment = self.find_appointment(midwife_id, appointment_id)
        if not appointment.can_edit:
            raise SchedulingValidationError("Cancelled appointments cannot be edited")

        start_time, end_time = self._resolve_time(
            midwife_id, appointment.service_code, day, start_time, end_time, custom, appointment_id
        )
        message = self._api.change_appointment_slot(appointment.ref, to_dmy(day), start_time, end_time)
        self._logger.info(
            "Appointment rescheduled",
            extra={"midwife_id": midwife_id, "appointment_id": appointment_id, "service_code": appointment.service_code},
        )
        return message

    def reactivate(
        self,
        midwife_id: str,
        appointment_id: str,
        day: date,
        start_time: str,
        end_time: str | None = None,
        custom: bool = False,
    ) -> str:
        appointment = self.find_appointment(midwife_id, appointment_id)
        if not appointment.can_reactivate:
            raise SchedulingValidationError("Only cancelled appointments can be reactivated")

        start_time, end_time = self._resolve_time(
            midwife_id, appointment.service_code, day, start_time, end_time, custom, appointment_id
        )
        message = self._api.reactivate_appointment(appointment.ref, to_dmy(day), start_time, end_time)
        self._logger.info(
            "Appointment reactivated",
            extra={"midwife_id": midwife_id, "appointment_id": appointment_id, "service_code": appointment.service_code},
        )
        return message

    def cancel(self, midwife_id: str, appointment_id: str) -> str:
        appointment = self.find_appointment(midwife_id, appointment_id)
        if not appointment.can_cancel:
            raise SchedulingValidationError("Appointment is already cancelled")

        message = self._api.cancel_appointment(appointment.ref)
        self._logger.info(
            "Appointment cancelled",
            extra={"midwife_id": midwife_id, "appointment_id": appointment_id, "service_code": appointment.service_code},
        )
        return message

    def _resolve_time(
        self,
        midwife_id: str,
        service_code: str,
        day: date,
        start_time: str,
        end_time: str | None,
        custom: bool,
        exclude_appointment_id: str | None = None,
    ) -> tuple[str, str]:
        """Check the requested time against fresh data and return the (start, end) to send."""
        if day < self.today():
            raise SchedulingValidationError("Date is in the past")

        if custom:
            if parse_hhmm(start_time) is None:
                raise SchedulingValidationError("Invalid time, expected HH:MM")
            end_time = calculate_end_time(start_time, self._catalog.get_duration_minutes(service_code))
            ranges = self.free_time_ranges(midwife_id, day, exclude_appointment_id)
            validate_custom_time(start_time, end_time, ranges)
            return start_time, end_time

        if not end_time:
            raise SchedulingValidationError("Please select a time slot")
        if not is_date_bookable(self.load_timetable(midwife_id), service_code, day, self.today()):
            raise SchedulingValidationError(f"Service {service_code} is not offered on this date")

        free = self.available_slots(midwife_id, service_code, day, exclude_appointment_id)
        if not any(matches_slot(slot, start_time, end_time) for slot in free):
            raise SchedulingValidationError("The selected slot is no longer available")
        return start_time, end_time
