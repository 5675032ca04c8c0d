"""
Tests for listing, checking, approving and rejecting client change requests.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from zoneinfo import ZoneInfo

import pytest

from midwife_desk.application.exceptions import ApiUpstreamError, NotFoundError, SchedulingValidationError
from midwife_desk.application.use_cases.client_requests import ClientRequestsUseCase
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.application.utils.dates import to_dmy
from midwife_desk.domain.entities.appointment import Appointment
from midwife_desk.domain.entities.client_request import ClientName, ClientRequest
from midwife_desk.domain.entities.profile import MidwifeProfile
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable
from midwife_desk.infrastructure.backend.mock_backend import MockMidwifeApi
from midwife_desk.infrastructure.catalog.service_catalog_store import ServiceCatalogStore


def _monday_ahead() -> date:
    today = date.today()
    return today + timedelta(days=7 + (0 - today.weekday()) % 7)


MONDAY = _monday_ahead()


def _apt(apt_id: str, start: str, end: str) -> Appointment:
    return Appointment(
        appointment_id=apt_id,
        service_code="B2",
        appointment_date=to_dmy(MONDAY),
        start_time=start,
        end_time=end,
        status="active",
        client_id="c1",
        midwife_id="m1",
    )


def _request(request_id: str = "r1", **changes) -> ClientRequest:
    request = ClientRequest(
        id=request_id,
        request_type="edit",
        midwife_id="m1",
        client_id="c1",
        service_code="B2",
        appointment_id="a1",
        suggested_date=to_dmy(MONDAY),
        suggested_start_time="10:00",
        suggested_end_time="10:50",
    )
    return replace(request, **changes)


def _use_case(requests: list[ClientRequest], appointments: list[Appointment] | None = None):
    timetable = Timetable(days={"Monday": {"B2": (TimeSlot("09:00", "09:50"), TimeSlot("10:00", "10:50"))}})
    api = MockMidwifeApi(
        profiles=[MidwifeProfile(id="m1", user_id="u1", timetable=timetable)],
        appointments=appointments if appointments is not None else [_apt("a1", "09:00", "09:50")],
        requests=requests,
        names={"c1": ClientName(name="Client One", email="c1@example.com")},
    )
    scheduling = AppointmentSchedulingUseCase(api=api, catalog=ServiceCatalogStore(), timezone=ZoneInfo("Europe/Berlin"))
    return ClientRequestsUseCase(api=api, scheduling=scheduling), api


def test_list_resolves_names_and_filters_status():
    uc, _ = _use_case([_request("r1"), _request("r2", status="approved")])

    views = uc.list_requests("m1", status="pending")

    assert [view.request.id for view in views] == ["r1"]
    assert views[0].client.name == "Client One"


def test_list_survives_name_lookup_failure():
    uc, api = _use_case([_request("r1")])

    def broken(ids):
        raise ApiUpstreamError("names down", 503)

    api.user_names = broken

    views = uc.list_requests("m1")

    assert views[0].client is None


def test_suggested_free_slot_is_valid():
    uc, _ = _use_case([_request()])

    assert uc.validate_reschedule("m1", _request()).valid


def test_suggestion_may_reuse_its_own_slot():
    uc, _ = _use_case([_request()])

    check = uc.validate_reschedule("m1", _request(suggested_start_time="09:00", suggested_end_time="09:50"))

    assert check.valid


@pytest.mark.parametrize(
    "changes, reason",
    [
        ({"suggested_date": None}, "missing"),
        ({"suggested_date": "31/02/2026"}, "invalid"),
        ({"suggested_date": "06/01/2020"}, "past"),
        ({"suggested_date": to_dmy(MONDAY + timedelta(days=1))}, "not offered"),
        ({"suggested_start_time": "11:00", "suggested_end_time": "11:50"}, "timetable slot"),
    ],
)
def test_invalid_suggestions(changes, reason):
    uc, _ = _use_case([_request()])

    check = uc.validate_reschedule("m1", _request(**changes))

    assert not check.valid
    assert reason in check.reason


def test_slot_taken_by_another_appointment():
    uc, _ = _use_case([_request()], [_apt("a1", "09:00", "09:50"), _apt("a2", "10:00", "10:50")])

    check = uc.validate_reschedule("m1", _request())

    assert not check.valid
    assert "already booked" in check.reason


def test_unverifiable_slot_is_invalid():
    uc, api = _use_case([_request()])

    def broken(midwife_id, client_now):
        raise ApiUpstreamError("timeout")

    api.monthly_view = broken

    check = uc.validate_reschedule("m1", _request())

    assert not check.valid
    assert "could not be verified" in check.reason


def test_approve_reschedule_moves_appointment():
    uc, api = _use_case([_request()])

    uc.approve("m1", "r1")

    assert api.appointments[0].start_time == "10:00"
    assert uc.find("m1", "r1").status == "approved"


def test_approve_to_alternative_slot():
    uc, api = _use_case([_request(suggested_start_time="11:00", suggested_end_time="11:50")])

    with pytest.raises(SchedulingValidationError):
        uc.approve("m1", "r1")

    uc.approve("m1", "r1", alternative_date=MONDAY, alternative_start_time="10:00", alternative_end_time="10:50")

    assert api.appointments[0].start_time == "10:00"


def test_approve_cancellation_cancels_appointment():
    uc, api = _use_case([_request(request_type="cancelled")])

    uc.approve("m1", "r1")

    assert api.appointments[0].is_cancelled
    assert uc.find("m1", "r1").status == "approved"


def test_reject_only_pending_requests():
    uc, _ = _use_case([_request()])

    uc.reject("m1", "r1")

    assert uc.find("m1", "r1").status == "rejected"
    with pytest.raises(SchedulingValidationError, match="already rejected"):
        uc.reject("m1", "r1")


def test_unknown_request_is_not_found():
    uc, _ = _use_case([])

    with pytest.raises(NotFoundError):
        uc.approve("m1", "nope")
