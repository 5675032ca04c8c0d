"""
Route tests against the in-memory demo backend.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from midwife_desk.application.use_cases.account import AccountUseCase
from midwife_desk.application.use_cases.bookings_overview import BookingsOverviewUseCase
from midwife_desk.application.use_cases.bulk_cancel import BulkCancelUseCase
from midwife_desk.application.use_cases.client_requests import ClientRequestsUseCase
from midwife_desk.application.use_cases.patient_appointments import PatientAppointmentsUseCase
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.application.utils.dates import to_dmy
from midwife_desk.infrastructure.backend.mock_backend import build_demo_backend
from midwife_desk.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from midwife_desk.main import app
from midwife_desk.wiring import dependencies

BERLIN = ZoneInfo("Europe/Berlin")
TODAY = datetime.now(BERLIN).date()
NEXT_MONDAY = TODAY + timedelta(days=(0 - TODAY.weekday()) % 7 or 7)


@pytest.fixture
def backend():
    return build_demo_backend(TODAY)


@pytest.fixture
def client(backend):
    scheduling = AppointmentSchedulingUseCase(api=backend, catalog=ServiceCatalogStore(), timezone=BERLIN)
    overrides = {
        dependencies.get_scheduling_use_case: lambda: scheduling,
        dependencies.get_patient_appointments_use_case: lambda: PatientAppointmentsUseCase(backend),
        dependencies.get_bulk_cancel_use_case: lambda: BulkCancelUseCase(backend, BERLIN),
        dependencies.get_client_requests_use_case: lambda: ClientRequestsUseCase(backend, scheduling),
        dependencies.get_bookings_overview_use_case: lambda: BookingsOverviewUseCase(backend, BERLIN),
        dependencies.get_account_use_case: lambda: AccountUseCase(backend),
    }
    app.dependency_overrides.update(overrides)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_profile_exposes_timetable(client):
    resp = client.get("/api/v1/midwives/midwife_1/profile")

    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Anna Muster"
    assert body["timetable"]["Monday"]["B2"][0] == {"start_time": "09:00", "end_time": "09:50", "label": "09:00-09:50"}
    assert body["service_titles"]["C2"] == "Stillberatung"


def test_valid_dates_include_next_monday(client):
    resp = client.get(
        "/api/v1/midwives/midwife_1/valid-dates",
        params={"service_code": "B2", "year": NEXT_MONDAY.year, "month": NEXT_MONDAY.month},
    )

    assert resp.status_code == 200
    assert to_dmy(NEXT_MONDAY) in resp.json()["dates"]


def test_slots_hide_booked_but_not_cancelled(client):
    b2 = client.get(
        "/api/v1/midwives/midwife_1/slots", params={"service_code": "B2", "date": to_dmy(NEXT_MONDAY)}
    ).json()
    b1 = client.get(
        "/api/v1/midwives/midwife_1/slots", params={"service_code": "B1", "date": to_dmy(NEXT_MONDAY)}
    ).json()

    assert [slot["label"] for slot in b2["slots"]] == ["10:00-10:50"]
    assert [slot["label"] for slot in b1["slots"]] == ["14:00-15:00", "15:15-16:15"]


def test_bad_date_is_400(client):
    resp = client.get("/api/v1/midwives/midwife_1/slots", params={"service_code": "B2", "date": "2026-03-02"})

    assert resp.status_code == 400


def test_free_ranges_with_time_options(client):
    resp = client.get(
        "/api/v1/midwives/midwife_1/free-ranges", params={"date": to_dmy(NEXT_MONDAY), "service_code": "C2"}
    )

    body = resp.json()
    assert body["ranges"][0]["label"] == "00:00 - 09:00"
    assert "10:50" not in body["time_options"]
    assert "11:00" in body["time_options"]


def test_create_and_conflict(client, backend):
    payload = {
        "client_id": "client_1",
        "service_code": "B2",
        "date": to_dmy(NEXT_MONDAY),
        "start_time": "10:00",
        "end_time": "10:50",
    }

    first = client.post("/api/v1/midwives/midwife_1/appointments", json=payload)
    second = client.post("/api/v1/midwives/midwife_1/appointments", json=payload)

    assert first.status_code == 201
    assert second.status_code == 400
    assert len(backend.appointments) == 3


def test_cancel_unknown_appointment_is_404(client):
    assert client.post("/api/v1/midwives/midwife_1/appointments/nope/cancel").status_code == 404


def test_reactivate_cancelled_appointment(client, backend):
    resp = client.post(
        "/api/v1/midwives/midwife_1/appointments/apt_2/reactivate",
        json={"date": to_dmy(NEXT_MONDAY), "start_time": "15:15", "end_time": "16:15"},
    )

    assert resp.status_code == 200
    reactivated = [apt for apt in backend.appointments if apt.appointment_id == "apt_2"][0]
    assert reactivated.normalized_status == "active"
    assert reactivated.start_time == "15:15"


def test_patient_month_view(client):
    resp = client.get(
        "/api/v1/midwives/midwife_1/clients/client_1/appointments",
        params={"year": NEXT_MONDAY.year, "month": NEXT_MONDAY.month},
    )

    body = resp.json()
    assert body["counts"]["all"] == 2
    assert body["counts"]["cancelled"] == 1
    statuses = [apt["status"] for apt in body["sections"][0]["appointments"]]
    assert statuses == ["active", "cancelled"]


def test_bulk_cancel_flow(client, backend):
    dates = client.get("/api/v1/midwives/midwife_1/bulk-cancel/dates").json()["dates"]

    assert dates == [to_dmy(NEXT_MONDAY)]

    resp = client.post("/api/v1/midwives/midwife_1/bulk-cancel", json={"date": to_dmy(NEXT_MONDAY)})

    assert resp.status_code == 200
    assert all(apt.is_cancelled for apt in backend.appointments)
    again = client.post("/api/v1/midwives/midwife_1/bulk-cancel", json={"date": to_dmy(NEXT_MONDAY)})
    assert again.status_code == 400


def test_leads_are_upcoming(client):
    body = client.get("/api/v1/midwives/midwife_1/leads").json()

    assert [lead["id"] for lead in body["upcoming"]] == ["lead_1"]
    assert body["upcoming"][0]["start_time"] == "10:00"
    assert body["upcoming"][0]["address"] == "—"


def test_requests_list_check_and_approve(client, backend):
    listed = client.get("/api/v1/midwives/midwife_1/requests", params={"status": "pending"}).json()
    check = client.get("/api/v1/midwives/midwife_1/requests/req_1/check").json()
    approved = client.post("/api/v1/midwives/midwife_1/requests/req_1/approve")

    assert listed[0]["client_name"] == "Client One"
    assert check == {"valid": True, "reason": None}
    assert approved.status_code == 200
    moved = [apt for apt in backend.appointments if apt.appointment_id == "apt_1"][0]
    assert moved.start_time == "10:00"
    assert client.post("/api/v1/midwives/midwife_1/requests/req_1/reject").status_code == 400


def test_login_roles_and_errors(client, backend):
    ok = client.post("/api/v1/login", json={"email": "hebamme@example.com", "password": "demo"})
    wrong = client.post("/api/v1/login", json={"email": "hebamme@example.com", "password": "nope"})
    invalid = client.post("/api/v1/login", json={"email": "not-an-email", "password": "demo"})

    assert ok.status_code == 200
    assert ok.json()["user"]["role"] == "midwife"
    assert wrong.status_code == 401
    assert invalid.status_code == 400


def test_forgot_password(client):
    resp = client.post("/api/v1/forgot-password", json={"email": "hebamme@example.com"})

    assert resp.json() == {"message": "Password reset email sent"}


def test_midwife_directory(client):
    body = client.get("/api/v1/midwives").json()

    assert [profile["id"] for profile in body] == ["midwife_1"]


class _BrokenScheduling:
    def load_profile(self, midwife_id):
        raise KeyError("timetable")


def test_unexpected_lookup_error_is_not_reported_as_404(client):
    app.dependency_overrides[dependencies.get_scheduling_use_case] = lambda: _BrokenScheduling()

    with pytest.raises(KeyError):
        client.get("/api/v1/midwives/midwife_1/profile")
