from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from midwife_desk.application.exceptions import (
    ApiRejectedError,
    ApiUpstreamError,
    NotFoundError,
    SchedulingValidationError,
)
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.application.utils.availability import is_slot_occupied, is_timetable_slot, matches_slot
from midwife_desk.application.utils.dates import parse_dmy, to_dmy, weekday_name
from midwife_desk.domain.entities.appointment import AppointmentRef
from midwife_desk.domain.entities.client_request import (
    REQUEST_APPROVED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    ClientName,
    ClientRequest,
)

REQUEST_STATUS_FILTERS = ("all", REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED)


@dataclass(frozen=True)
class ClientRequestView:
    request: ClientRequest
    client: ClientName | None = None


@dataclass(frozen=True)
class RescheduleCheck:
    valid: bool
    reason: str | None = None


class ClientRequestsUseCase:
    def __init__(self, api: MidwifeApiPort, scheduling: AppointmentSchedulingUseCase) -> None:
        self._api = api
        self._scheduling = scheduling
        self._logger = logging.getLogger(__name__)

    def list_requests(self, midwife_id: str, status: str = "all") -> list[ClientRequestView]:
        """Requests for the midwife with client names resolved where the lookup succeeds."""
        status = (status or "all").strip().lower()
        if status not in REQUEST_STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status}")

        requests = self._api.list_client_requests(midwife_id)
        if status != "all":
            requests = [request for request in requests if request.status == status]

        client_ids = sorted({request.client_id for request in requests if request.client_id})
        names: dict[str, ClientName] = {}
        try:
            names = self._api.user_names(client_ids)
        except (ApiUpstreamError, ApiRejectedError) as e:
            self._logger.warning("Client name lookup failed", extra={"midwife_id": midwife_id, "reason": str(e)})

        return [ClientRequestView(request=request, client=names.get(request.client_id)) for request in requests]

    def find(self, midwife_id: str, request_id: str) -> ClientRequest:
        for request in self._api.list_client_requests(midwife_id):
            if request.id == request_id:
                return request
        raise NotFoundError(f"Request {request_id} not found")

    def validate_reschedule(self, midwife_id: str, request: ClientRequest, today: date | None = None) -> RescheduleCheck:
        """Whether the client's suggested slot can be accepted as is."""
        if not (request.suggested_date and request.suggested_start_time and request.suggested_end_time):
            return RescheduleCheck(False, "Suggested date or time is missing")

        day = parse_dmy(request.suggested_date)
        if day is None:
            return RescheduleCheck(False, "Suggested date is invalid")
        if day < (today or self._scheduling.today()):
            return RescheduleCheck(False, "Suggested date is in the past")

        timetable = self._scheduling.load_timetable(midwife_id)
        weekday = weekday_name(day)
        if timetable is None or not timetable.offers(weekday, request.service_code):
            return RescheduleCheck(False, f"Service {request.service_code} is not offered on {weekday}")
        if not is_timetable_slot(
            timetable, request.service_code, day, request.suggested_start_time, request.suggested_end_time
        ):
            return RescheduleCheck(False, "Suggested time does not match a timetable slot")

        try:
            appointments = self._scheduling.midwife_appointments(midwife_id)
        except (ApiUpstreamError, ApiRejectedError) as e:
            self._logger.warning(
                "Slot check failed", extra={"midwife_id": midwife_id, "appointment_id": request.appointment_id, "reason": str(e)}
            )
            return RescheduleCheck(False, "Slot availability could not be verified")

        if is_slot_occupied(
            appointments,
            day,
            request.suggested_start_time,
            request.suggested_end_time,
            exclude_appointment_id=request.appointment_id,
        ):
            return RescheduleCheck(False, "Suggested slot is already booked")
        return RescheduleCheck(True)

    def approve(
        self,
        midwife_id: str,
        request_id: str,
        alternative_date: date | None = None,
        alternative_start_time: str | None = None,
        alternative_end_time: str | None = None,
    ) -> str:
        """
        Approve a pending request.

        Cancellation requests cancel the appointment. Reschedule requests move it
        to the suggested slot, or to an alternative date and slot chosen by the
        midwife, which must be one of the free timetable slots.
        """
        request = self._pending(midwife_id, request_id)
        ref = AppointmentRef(
            appointment_id=request.appointment_id,
            service_code=request.service_code,
            midwife_id=request.midwife_id,
            client_id=request.client_id,
        )

        if not request.is_reschedule:
            self._api.cancel_appointment(ref)
        elif alternative_date is not None:
            self._check_alternative(midwife_id, request, alternative_date, alternative_start_time, alternative_end_time)
            self._api.change_appointment_slot(
                ref, to_dmy(alternative_date), alternative_start_time, alternative_end_time
            )
        else:
            check = self.validate_reschedule(midwife_id, request)
            if not check.valid:
                raise SchedulingValidationError(check.reason or "Suggested slot is not available")
            self._api.change_appointment_slot(
                ref, request.suggested_date, request.suggested_start_time, request.suggested_end_time
            )

        message = self._api.update_request_status(request.id, REQUEST_APPROVED)
        self._logger.info(
            "Client request approved",
            extra={"midwife_id": midwife_id, "appointment_id": request.appointment_id, "reason": request.request_type},
        )
        return message

    def reject(self, midwife_id: str, request_id: str) -> str:
        request = self._pending(midwife_id, request_id)
        message = self._api.update_request_status(request.id, REQUEST_REJECTED)
        self._logger.info(
            "Client request rejected",
            extra={"midwife_id": midwife_id, "appointment_id": request.appointment_id, "reason": request.request_type},
        )
        return message

    def _pending(self, midwife_id: str, request_id: str) -> ClientRequest:
        request = self.find(midwife_id, request_id)
        if not request.is_pending:
            raise SchedulingValidationError(f"Request is already {request.status}")
        return request

    def _check_alternative(
        self,
        midwife_id: str,
        request: ClientRequest,
        day: date,
        start_time: str | None,
        end_time: str | None,
    ) -> None:
        if not (start_time and end_time):
            raise SchedulingValidationError("Please select a time slot")
        if day < self._scheduling.today():
            raise SchedulingValidationError("Date is in the past")
        free = self._scheduling.available_slots(
            midwife_id, request.service_code, day, exclude_appointment_id=request.appointment_id
        )
        if not any(matches_slot(slot, start_time, end_time) for slot in free):
            raise SchedulingValidationError("The selected slot is no longer available")
