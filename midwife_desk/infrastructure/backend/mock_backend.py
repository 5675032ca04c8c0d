from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from midwife_desk.application.exceptions import ApiRejectedError
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.utils.dates import month_key, parse_dmy, parse_hhmm, to_dmy
from midwife_desk.domain.entities.appointment import STATUS_ACTIVE, STATUS_CANCELLED, Appointment, AppointmentRef
from midwife_desk.domain.entities.bookings import Lead, PhoneBooking, PrivateServiceBooking
from midwife_desk.domain.entities.client_request import ClientName, ClientRequest
from midwife_desk.domain.entities.profile import AuthenticatedUser, LoginResult, MidwifeProfile
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable


class MockMidwifeApi(MidwifeApiPort):
    """In-memory stand-in for the midwife API, used in dev and tests."""

    def __init__(
        self,
        profiles: list[MidwifeProfile] | None = None,
        appointments: list[Appointment] | None = None,
        leads: list[Lead] | None = None,
        phone_bookings: list[PhoneBooking] | None = None,
        private_bookings: list[PrivateServiceBooking] | None = None,
        requests: list[ClientRequest] | None = None,
        names: dict[str, ClientName] | None = None,
        accounts: dict[str, tuple[str, AuthenticatedUser]] | None = None,
    ) -> None:
        self._profiles = {profile.id: profile for profile in profiles or []}
        self._appointments = list(appointments or [])
        self._leads = list(leads or [])
        self._phone_bookings = list(phone_bookings or [])
        self._private_bookings = list(private_bookings or [])
        self._requests = {request.id: request for request in requests or []}
        self._names = dict(names or {})
        self._accounts = dict(accounts or {})
        self._logger = logging.getLogger(__name__)

    @property
    def appointments(self) -> list[Appointment]:
        return list(self._appointments)

    # Account

    def login(self, email: str, password: str) -> LoginResult:
        account = self._accounts.get(email.strip().lower())
        if account is None or account[0] != password:
            raise ApiRejectedError("Invalid email or password")
        return LoginResult(token=f"mock_token_{account[1].id}", user=account[1])

    def forgot_password(self, email: str) -> str:
        self._logger.info("Mock password reset requested", extra={"reason": email})
        return "Password reset email sent"

    # Profiles

    def list_midwives(self) -> list[MidwifeProfile]:
        return list(self._profiles.values())

    def get_profile_by_user_id(self, user_id: str) -> MidwifeProfile:
        for profile in self._profiles.values():
            if profile.user_id == user_id:
                return profile
        raise ApiRejectedError("Midwife not found")

    def get_profile(self, midwife_id: str) -> MidwifeProfile:
        profile = self._profiles.get(midwife_id)
        if profile is None:
            raise ApiRejectedError("Midwife not found")
        return profile

    # Bookings

    def list_leads(self, midwife_id: str) -> list[Lead]:
        return [lead for lead in self._leads if lead.midwife_id == midwife_id]

    def list_phone_bookings(self, midwife_id: str) -> list[PhoneBooking]:
        return [booking for booking in self._phone_bookings if booking.midwife_id == midwife_id]

    def list_private_bookings(self, midwife_id: str) -> list[PrivateServiceBooking]:
        return [booking for booking in self._private_bookings if booking.midwife_id == midwife_id]

    # Appointments

    def monthly_view(self, midwife_id: str, client_now: datetime) -> dict[str, list[Appointment]]:
        months: dict[str, list[Appointment]] = {}
        for apt in self._appointments:
            day = parse_dmy(apt.appointment_date)
            if apt.midwife_id != midwife_id or day is None:
                continue
            months.setdefault(month_key(day), []).append(apt)
        return months

    def client_appointments(self, midwife_id: str, client_id: str) -> list[Appointment]:
        return [
            apt for apt in self._appointments if apt.midwife_id == midwife_id and apt.client_id == client_id
        ]

    def create_appointment(
        self,
        midwife_id: str,
        client_id: str,
        service_code: str,
        appointment_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        appointment = Appointment(
            appointment_id=f"mock_apt_{len(self._appointments) + 1}",
            service_code=service_code,
            appointment_date=appointment_date,
            start_time=start_time,
            end_time=end_time,
            duration=_duration(start_time, end_time),
            status=STATUS_ACTIVE,
            client_id=client_id,
            midwife_id=midwife_id,
        )
        self._appointments.append(appointment)
        self._logger.info(
            "Mock appointment created",
            extra={"appointment_id": appointment.appointment_id, "service_code": service_code},
        )
        return "Appointment created"

    def change_appointment_slot(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        self._update(
            appointment.appointment_id,
            appointment_date=new_date,
            start_time=start_time,
            end_time=end_time,
            duration=_duration(start_time, end_time),
        )
        return "Appointment updated"

    def cancel_appointment(self, appointment: AppointmentRef) -> str:
        self._update(appointment.appointment_id, status=STATUS_CANCELLED)
        return "Appointment cancelled"

    def reactivate_appointment(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        self._update(
            appointment.appointment_id,
            appointment_date=new_date,
            start_time=start_time,
            end_time=end_time,
            duration=_duration(start_time, end_time),
            status=STATUS_ACTIVE,
        )
        return "Appointment reactivated"

    def bulk_cancel(self, midwife_id: str, date: str, from_time: str | None) -> str:
        threshold = parse_hhmm(from_time) if from_time else None
        cancelled = 0
        for index, apt in enumerate(self._appointments):
            if apt.midwife_id != midwife_id or apt.is_cancelled:
                continue
            if parse_dmy(apt.appointment_date) != parse_dmy(date):
                continue
            start = parse_hhmm(apt.start_time)
            if threshold is not None and (start is None or start < threshold):
                continue
            self._appointments[index] = replace(apt, status=STATUS_CANCELLED)
            cancelled += 1
        return f"{cancelled} appointment(s) cancelled"

    def _update(self, appointment_id: str, **changes: object) -> None:
        for index, apt in enumerate(self._appointments):
            if apt.appointment_id == appointment_id:
                self._appointments[index] = replace(apt, **changes)
                self._logger.info("Mock appointment updated", extra={"appointment_id": appointment_id})
                return
        raise ApiRejectedError("Appointment not found")

    # Client requests

    def list_client_requests(self, midwife_id: str) -> list[ClientRequest]:
        return [request for request in self._requests.values() if request.midwife_id == midwife_id]

    def update_request_status(self, request_id: str, status: str) -> str:
        request = self._requests.get(request_id)
        if request is None:
            raise ApiRejectedError("Request not found")
        self._requests[request_id] = replace(request, status=status)
        return f"Request {status}"

    def user_names(self, ids: list[str]) -> dict[str, ClientName]:
        return {user_id: self._names[user_id] for user_id in ids if user_id in self._names}


def _duration(start_time: str, end_time: str) -> int | None:
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if start is None or end is None:
        return None
    return end - start


def build_demo_backend(today: date) -> MockMidwifeApi:
    """A mock backend seeded with one midwife, a weekly timetable and a few bookings."""
    morning = (TimeSlot("09:00", "09:50"), TimeSlot("10:00", "10:50"))
    afternoon = (TimeSlot("14:00", "15:00"), TimeSlot("15:15", "16:15"))
    timetable = Timetable(
        days={
            "Monday": {"B1": afternoon, "B2": morning},
            "Wednesday": {"C1": afternoon, "B2": morning},
            "Friday": {"D1": afternoon, "C2": (TimeSlot("11:00", "11:25"),)},
        }
    )
    user = AuthenticatedUser(id="user_1", email="hebamme@example.com", role="midwife", username="hebamme")
    profile = MidwifeProfile(
        id="midwife_1",
        user_id=user.id,
        first_name="Anna",
        last_name="Muster",
        email=user.email,
        timetable=timetable,
        is_profile_complete=True,
        midwife_status=True,
    )
    next_monday = today + timedelta(days=(0 - today.weekday()) % 7 or 7)
    appointments = [
        Appointment(
            appointment_id="apt_1",
            service_code="B2",
            appointment_date=to_dmy(next_monday),
            start_time="09:00",
            end_time="09:50",
            duration=50,
            status=STATUS_ACTIVE,
            client_id="client_1",
            midwife_id=profile.id,
        ),
        Appointment(
            appointment_id="apt_2",
            service_code="B1",
            appointment_date=to_dmy(next_monday),
            start_time="14:00",
            end_time="15:00",
            duration=60,
            status=STATUS_CANCELLED,
            client_id="client_1",
            midwife_id=profile.id,
        ),
    ]
    leads = [
        Lead(
            id="lead_1",
            midwife_id=profile.id,
            full_name="Client One",
            date=to_dmy(next_monday),
            user_id="client_1",
            selected_slot="10:00-10:50",
            status="pending",
        )
    ]
    requests = [
        ClientRequest(
            id="req_1",
            request_type="edit",
            midwife_id=profile.id,
            client_id="client_1",
            service_code="B2",
            appointment_id="apt_1",
            suggested_date=to_dmy(next_monday),
            suggested_start_time="10:00",
            suggested_end_time="10:50",
            note="Could we move this to ten?",
        )
    ]
    return MockMidwifeApi(
        profiles=[profile],
        appointments=appointments,
        leads=leads,
        requests=requests,
        names={"client_1": ClientName(name="Client One", role="client")},
        accounts={user.email: ("demo", user)},
    )
