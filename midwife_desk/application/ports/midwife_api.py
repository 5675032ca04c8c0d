from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from midwife_desk.domain.entities.appointment import Appointment, AppointmentRef
from midwife_desk.domain.entities.bookings import Lead, PhoneBooking, PrivateServiceBooking
from midwife_desk.domain.entities.client_request import ClientName, ClientRequest
from midwife_desk.domain.entities.profile import LoginResult, MidwifeProfile


class MidwifeApiPort(ABC):
    # Account

    @abstractmethod
    def login(self, email: str, password: str) -> LoginResult:
        raise NotImplementedError

    @abstractmethod
    def forgot_password(self, email: str) -> str:
        """Request a password reset mail. Returns the API message."""
        raise NotImplementedError

    # Profiles

    @abstractmethod
    def list_midwives(self) -> list[MidwifeProfile]:
        raise NotImplementedError

    @abstractmethod
    def get_profile_by_user_id(self, user_id: str) -> MidwifeProfile:
        raise NotImplementedError

    @abstractmethod
    def get_profile(self, midwife_id: str) -> MidwifeProfile:
        raise NotImplementedError

    # Bookings

    @abstractmethod
    def list_leads(self, midwife_id: str) -> list[Lead]:
        raise NotImplementedError

    @abstractmethod
    def list_phone_bookings(self, midwife_id: str) -> list[PhoneBooking]:
        raise NotImplementedError

    @abstractmethod
    def list_private_bookings(self, midwife_id: str) -> list[PrivateServiceBooking]:
        raise NotImplementedError

    # Appointments

    @abstractmethod
    def monthly_view(self, midwife_id: str, client_now: datetime) -> dict[str, list[Appointment]]:
        """All of a midwife's appointments, keyed by "M/YYYY" month."""
        raise NotImplementedError

    @abstractmethod
    def client_appointments(self, midwife_id: str, client_id: str) -> list[Appointment]:
        """Pre-birth and post-birth appointments of one client."""
        raise NotImplementedError

    @abstractmethod
    def create_appointment(
        self,
        midwife_id: str,
        client_id: str,
        service_code: str,
        appointment_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        raise NotImplementedError

    @abstractmethod
    def change_appointment_slot(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        raise NotImplementedError

    @abstractmethod
    def cancel_appointment(self, appointment: AppointmentRef) -> str:
        raise NotImplementedError

    @abstractmethod
    def reactivate_appointment(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        raise NotImplementedError

    @abstractmethod
    def bulk_cancel(self, midwife_id: str, date: str, from_time: str | None) -> str:
        """Cancel all of a day's appointments, optionally only those starting at or after from_time."""
        raise NotImplementedError

    # Client requests

    @abstractmethod
    def list_client_requests(self, midwife_id: str) -> list[ClientRequest]:
        raise NotImplementedError

    @abstractmethod
    def update_request_status(self, request_id: str, status: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def user_names(self, ids: list[str]) -> dict[str, ClientName]:
        raise NotImplementedError
