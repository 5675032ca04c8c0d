from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from midwife_desk.application.dto.api_envelope import ApiEnvelope
from midwife_desk.application.exceptions import ApiContractError, ApiRejectedError, ApiUpstreamError
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.core.config import settings
from midwife_desk.domain.entities.appointment import Appointment, AppointmentRef
from midwife_desk.domain.entities.bookings import Lead, PhoneBooking, PrivateServiceBooking
from midwife_desk.domain.entities.client_request import ClientName, ClientRequest
from midwife_desk.domain.entities.profile import LoginResult, MidwifeProfile
from midwife_desk.infrastructure.backend import mappers

# Services whose appointments are addressed by appointment id alone
ID_ONLY_SERVICE_CODES = {"A1/A2"}


class MidwifeApiClient(MidwifeApiPort):
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.MIDWIFE_API_BASE_URL).rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout or settings.MIDWIFE_API_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    def _request(
        self,
        method: str,
        path: str,
        default_error: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ApiEnvelope:
        try:
            resp = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            self._logger.error("Midwife API unreachable", extra={"path": path, "reason": str(e)})
            raise ApiUpstreamError(default_error) from e

        envelope = _read_envelope(resp)
        if resp.status_code >= 400:
            self._logger.error(
                "Midwife API call failed",
                extra={"path": path, "status": resp.status_code, "reason": envelope.error_message("")},
            )
            raise ApiUpstreamError(envelope.error_message(f"HTTP {resp.status_code}"), resp.status_code)
        if not envelope.success:
            self._logger.warning(
                "Midwife API rejected call",
                extra={"path": path, "reason": envelope.error_message(default_error)},
            )
            raise ApiRejectedError(envelope.error_message(default_error))
        return envelope

    # Account

    def login(self, email: str, password: str) -> LoginResult:
        envelope = self._request(
            "POST", "/api/midwife/login", "Login failed", json={"email": email, "password": password}
        )
        result = mappers.map_login(envelope.token, envelope.user)
        if result is None:
            raise ApiContractError("Login response is missing token or user")
        return result

    def forgot_password(self, email: str) -> str:
        envelope = self._request(
            "POST", "/api/users/forgot-password", "Failed to send reset email", json={"email": email}
        )
        return envelope.success_message("Password reset email sent")

    # Profiles

    def list_midwives(self) -> list[MidwifeProfile]:
        envelope = self._request("GET", "/api/midwives", "Failed to load midwives")
        profiles = (mappers.map_profile(item) for item in envelope.data_list())
        return [profile for profile in profiles if profile is not None]

    def get_profile_by_user_id(self, user_id: str) -> MidwifeProfile:
        envelope = self._request(
            "GET", "/api/midwives/userId", "Failed to load profile", params={"userId": user_id}
        )
        return _require_profile(envelope)

    def get_profile(self, midwife_id: str) -> MidwifeProfile:
        envelope = self._request("GET", f"/api/midwives/{midwife_id}", "Failed to load profile")
        return _require_profile(envelope)

    # Bookings

    def list_leads(self, midwife_id: str) -> list[Lead]:
        envelope = self._request("GET", f"/api/public/midwifeBooking/{midwife_id}", "Failed to load leads")
        leads = (mappers.map_lead(item) for item in envelope.data_list())
        return [lead for lead in leads if lead is not None]

    def list_phone_bookings(self, midwife_id: str) -> list[PhoneBooking]:
        envelope = self._request(
            "GET",
            "/api/public/phoneBooking",
            "Failed to load phone bookings",
            params={"midwifeId": midwife_id},
        )
        bookings = (mappers.map_phone_booking(item) for item in envelope.data_list())
        return [booking for booking in bookings if booking is not None]

    def list_private_bookings(self, midwife_id: str) -> list[PrivateServiceBooking]:
        envelope = self._request(
            "GET",
            f"/api/public/privateServiceBooking/{midwife_id}",
            "Failed to load private service bookings",
        )
        bookings = (mappers.map_private_booking(item) for item in envelope.data_list())
        return [booking for booking in bookings if booking is not None]

    # Appointments

    def monthly_view(self, midwife_id: str, client_now: datetime) -> dict[str, list[Appointment]]:
        envelope = self._request(
            "POST",
            "/api/public/PostBirthAppointments/monthly-view",
            "Failed to load appointments",
            json={"midwifeId": midwife_id, "clientET": client_now.isoformat()},
        )
        return mappers.map_monthly_view(envelope.data_dict(), midwife_id)

    def client_appointments(self, midwife_id: str, client_id: str) -> list[Appointment]:
        appointments: list[Appointment] = []
        for phase in ("PreBirthAppointments", "PostBirthAppointments"):
            try:
                envelope = self._request(
                    "GET",
                    f"/api/public/{phase}/clientAppointment",
                    "Failed to load appointments",
                    params={"midwifeId": midwife_id, "clientId": client_id},
                )
            except ApiRejectedError:
                continue
            buckets = envelope.data_dict().get("appointments")
            appointments.extend(mappers.map_appointment_buckets(buckets, midwife_id, client_id))
        return appointments

    def create_appointment(
        self,
        midwife_id: str,
        client_id: str,
        service_code: str,
        appointment_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        envelope = self._request(
            "POST",
            "/api/public/createAppointment",
            "Failed to create appointment",
            json={
                "serviceCode": service_code,
                "clientId": client_id,
                "midwifeId": midwife_id,
                "appointmentDate": appointment_date,
                "startTime": start_time,
                "endTime": end_time,
            },
        )
        return envelope.success_message("Appointment created")

    def change_appointment_slot(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        payload = _appointment_reference(appointment)
        payload.update(
            {
                "updatedDate": new_date,
                "updatedStartTime": start_time,
                "updatedEndTime": end_time,
            }
        )
        envelope = self._request(
            "PUT", "/api/public/changeAppointmentSlots", "Failed to update appointment", json=payload
        )
        return envelope.success_message("Appointment updated")

    def cancel_appointment(self, appointment: AppointmentRef) -> str:
        envelope = self._request(
            "PUT",
            "/api/public/cancelAppointment",
            "Failed to cancel appointment",
            json=_appointment_reference(appointment),
        )
        return envelope.success_message("Appointment cancelled")

    def reactivate_appointment(
        self,
        appointment: AppointmentRef,
        new_date: str,
        start_time: str,
        end_time: str,
    ) -> str:
        payload = {
            "appointmentId": appointment.appointment_id,
            "serviceCode": appointment.service_code,
            "updatedDate": new_date,
            "updatedStartTime": start_time,
            "updatedEndTime": end_time,
            "midwifeId": appointment.midwife_id,
            "clientId": appointment.client_id,
        }
        envelope = self._request(
            "PUT", "/api/public/reactivateAppointment", "Failed to reactivate appointment", json=payload
        )
        return envelope.success_message("Appointment reactivated")

    def bulk_cancel(self, midwife_id: str, date: str, from_time: str | None) -> str:
        envelope = self._request(
            "PUT",
            "/api/public/bulk-cancelAppointments",
            "Failed to cancel appointments",
            json={"midwifeId": midwife_id, "date": date, "time": from_time},
        )
        return envelope.success_message("Appointments cancelled")

    # Client requests

    def list_client_requests(self, midwife_id: str) -> list[ClientRequest]:
        envelope = self._request(
            "GET", "/api/public/clientRequest", "Failed to fetch requests", params={"midwifeId": midwife_id}
        )
        requests = (mappers.map_client_request(item) for item in envelope.data_list())
        return [request for request in requests if request is not None]

    def update_request_status(self, request_id: str, status: str) -> str:
        envelope = self._request(
            "PATCH",
            "/api/public/clientRequest/updateRequestStatus",
            "Failed to update request",
            json={"requestId": request_id, "status": status},
        )
        return envelope.success_message(f"Request {status}")

    def user_names(self, ids: list[str]) -> dict[str, ClientName]:
        if not ids:
            return {}
        envelope = self._request("POST", "/api/public/user/names", "Failed to load names", json={"ids": ids})
        return mappers.map_client_names(envelope.data_dict())


def _read_envelope(resp: httpx.Response) -> ApiEnvelope:
    """Parse the body leniently: empty or invalid JSON reads as an empty envelope."""
    try:
        body = resp.json() if resp.content else {}
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    try:
        return ApiEnvelope.model_validate(body)
    except ValidationError:
        return ApiEnvelope()


def _require_profile(envelope: ApiEnvelope) -> MidwifeProfile:
    profile = mappers.map_profile(envelope.data)
    if profile is None:
        raise ApiContractError("Profile response is missing data")
    return profile


def _appointment_reference(appointment: AppointmentRef) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "appointmentId": appointment.appointment_id,
        "serviceCode": appointment.service_code,
    }
    if appointment.service_code not in ID_ONLY_SERVICE_CODES:
        payload["midwifeId"] = appointment.midwife_id
        payload["clientId"] = appointment.client_id
    return payload
