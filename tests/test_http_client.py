"""
Tests for the httpx midwife API client against a mocked transport.
"""

from __future__ import annotations

import json
from datetime import datetime

import httpx
import pytest

from midwife_desk.application.exceptions import ApiContractError, ApiRejectedError, ApiUpstreamError
from midwife_desk.domain.entities.appointment import AppointmentRef
from midwife_desk.infrastructure.backend.http_client import MidwifeApiClient


def _client(handler) -> MidwifeApiClient:
    return MidwifeApiClient(base_url="http://api.test/", timeout=5, transport=httpx.MockTransport(handler))


def _recording_client(response: dict, status_code: int = 200):
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json=response)

    return _client(handler), calls


def test_success_false_raises_rejected():
    client, _ = _recording_client({"success": False, "message": "Slot already taken"})

    with pytest.raises(ApiRejectedError, match="Slot already taken"):
        client.create_appointment("m1", "c1", "B1", "02/03/2026", "09:00", "10:00")


def test_http_error_status_raises_upstream():
    client, _ = _recording_client({"error": "boom"}, status_code=500)

    with pytest.raises(ApiUpstreamError) as exc_info:
        client.list_midwives()

    assert exc_info.value.status_code == 500
    assert str(exc_info.value) == "boom"


def test_network_failure_raises_upstream():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ApiUpstreamError, match="Failed to load leads"):
        _client(handler).list_leads("m1")


def test_invalid_json_reads_as_failed_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(ApiRejectedError, match="Failed to fetch requests"):
        _client(handler).list_client_requests("m1")


def test_profile_maps_timetable():
    client, calls = _recording_client(
        {
            "success": True,
            "data": {
                "_id": "m1",
                "userId": "u1",
                "personalInfo": {"firstName": "Anna", "lastName": "Muster"},
                "identity": {
                    "timetable": {
                        "Monday": {"slots": {"B2": [{"startTime": "09:00", "endTime": "09:50"}]}},
                        "Tuesday": {"slots": {}},
                    }
                },
                "services": {"B2": {"title": "Hilfeleistung"}},
            },
        }
    )

    profile = client.get_profile_by_user_id("u1")

    assert calls[0].url.path == "/api/midwives/userId"
    assert calls[0].url.params["userId"] == "u1"
    assert profile.id == "m1"
    assert profile.display_name == "Anna Muster"
    assert profile.timetable.offers("Monday", "B2")
    assert not profile.timetable.offers("Tuesday", "B2")
    assert profile.service_titles == {"B2": "Hilfeleistung"}


def test_profile_without_data_is_contract_error():
    client, _ = _recording_client({"success": True})

    with pytest.raises(ApiContractError):
        client.get_profile("m1")


def test_monthly_view_flattens_buckets():
    client, calls = _recording_client(
        {
            "success": True,
            "data": {
                "3/2026": {
                    "B2": [
                        {
                            "appointmentId": "a1",
                            "appointmentDate": "02/03/2026",
                            "startTime": "09:00",
                            "endTime": "09:50",
                            "status": "active",
                            "clientId": "c1",
                        },
                        {"appointmentId": "broken"},
                    ],
                    "B1": [],
                },
                "bad": [],
            },
        }
    )

    months = client.monthly_view("m1", datetime(2026, 3, 1, 12, 0))

    body = json.loads(calls[0].content)
    assert body["midwifeId"] == "m1"
    assert body["clientET"].startswith("2026-03-01T12:00")
    assert list(months) == ["3/2026"]
    [apt] = months["3/2026"]
    assert apt.appointment_id == "a1"
    assert apt.service_code == "B2"
    assert apt.midwife_id == "m1"
    assert apt.client_id == "c1"


def test_client_appointments_skips_rejected_phase():
    def handler(request: httpx.Request) -> httpx.Response:
        if "PreBirth" in request.url.path:
            return httpx.Response(200, json={"success": False, "message": "No appointments"})
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "appointments": {
                        "D1": [{"_id": "a9", "appointmentDate": "10/03/2026", "startTime": "14:00", "endTime": "15:00"}]
                    }
                },
            },
        )

    appointments = _client(handler).client_appointments("m1", "c1")

    assert [apt.appointment_id for apt in appointments] == ["a9"]
    assert appointments[0].client_id == "c1"
    assert appointments[0].normalized_status == "active"


def test_cancel_omits_ids_for_initial_consultation():
    client, calls = _recording_client({"success": True, "message": "Cancelled"})

    message = client.cancel_appointment(AppointmentRef("a1", "A1/A2", midwife_id="m1", client_id="c1"))

    assert message == "Cancelled"
    assert calls[0].method == "PUT"
    assert json.loads(calls[0].content) == {"appointmentId": "a1", "serviceCode": "A1/A2"}


def test_change_slot_payload():
    client, calls = _recording_client({"success": True})

    client.change_appointment_slot(
        AppointmentRef("a1", "B2", midwife_id="m1", client_id="c1"), "09/03/2026", "10:00", "10:50"
    )

    assert calls[0].url.path == "/api/public/changeAppointmentSlots"
    assert json.loads(calls[0].content) == {
        "appointmentId": "a1",
        "serviceCode": "B2",
        "midwifeId": "m1",
        "clientId": "c1",
        "updatedDate": "09/03/2026",
        "updatedStartTime": "10:00",
        "updatedEndTime": "10:50",
    }


def test_bulk_cancel_sends_null_time():
    client, calls = _recording_client({"success": True})

    client.bulk_cancel("m1", "09/03/2026", None)

    assert json.loads(calls[0].content) == {"midwifeId": "m1", "date": "09/03/2026", "time": None}


def test_login_maps_user():
    client, _ = _recording_client(
        {"success": True, "token": "t0k", "user": {"id": "u1", "email": "a@b.de", "role": "midwife"}}
    )

    result = client.login("a@b.de", "secret")

    assert result.token == "t0k"
    assert result.user.role == "midwife"


def test_login_without_token_is_contract_error():
    client, _ = _recording_client({"success": True, "user": {"id": "u1"}})

    with pytest.raises(ApiContractError):
        client.login("a@b.de", "secret")


def test_user_names_skips_empty_lookup():
    client, calls = _recording_client({"success": True, "data": {}})

    assert client.user_names([]) == {}
    assert calls == []


def test_user_names_maps_details():
    client, calls = _recording_client(
        {"success": True, "data": {"c1": {"name": "Client One", "email": "c@x.de", "role": "client"}}}
    )

    names = client.user_names(["c1"])

    assert json.loads(calls[0].content) == {"ids": ["c1"]}
    assert names["c1"].name == "Client One"
