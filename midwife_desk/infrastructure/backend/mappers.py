from __future__ import annotations

from typing import Any

from midwife_desk.domain.entities.appointment import Appointment
from midwife_desk.domain.entities.bookings import CourseSession, Lead, PhoneBooking, PrivateServiceBooking
from midwife_desk.domain.entities.client_request import ClientName, ClientRequest
from midwife_desk.domain.entities.profile import AuthenticatedUser, LoginResult, MidwifeProfile
from midwife_desk.domain.entities.timetable import TimeSlot, Timetable


def _str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def map_timetable(raw: Any) -> Timetable | None:
    if not isinstance(raw, dict):
        return None
    days: dict[str, dict[str, tuple[TimeSlot, ...]]] = {}
    for weekday, day in raw.items():
        services = (day or {}).get("slots") if isinstance(day, dict) else None
        if not isinstance(services, dict):
            continue
        day_slots: dict[str, tuple[TimeSlot, ...]] = {}
        for service_code, slots in services.items():
            if not isinstance(slots, list):
                continue
            day_slots[str(service_code)] = tuple(
                TimeSlot(start_time=str(slot["startTime"]), end_time=str(slot["endTime"]))
                for slot in slots
                if isinstance(slot, dict) and slot.get("startTime") and slot.get("endTime")
            )
        days[str(weekday)] = day_slots
    return Timetable(days=days)


def map_profile(raw: Any) -> MidwifeProfile | None:
    if not isinstance(raw, dict) or not raw.get("_id"):
        return None
    personal = raw.get("personalInfo") or {}
    identity = raw.get("identity") or {}
    services = raw.get("services") or {}
    service_titles = {
        str(code): str(service.get("title"))
        for code, service in services.items()
        if isinstance(service, dict) and service.get("title")
    } if isinstance(services, dict) else {}
    return MidwifeProfile(
        id=str(raw["_id"]),
        user_id=str(raw.get("userId") or ""),
        first_name=_str(personal.get("firstName")),
        last_name=_str(personal.get("lastName")),
        email=_str(personal.get("email")),
        phone=_str(personal.get("phone")),
        timetable=map_timetable(identity.get("timetable")) if isinstance(identity, dict) else None,
        service_titles=service_titles,
        is_profile_complete=bool(raw.get("isProfileComplete")),
        midwife_status=bool(raw.get("midwifeStatus")),
    )


def map_appointment(
    raw: Any,
    service_code: str,
    midwife_id: str | None = None,
    client_id: str | None = None,
) -> Appointment | None:
    if not isinstance(raw, dict):
        return None
    if not (raw.get("appointmentDate") and raw.get("startTime") and raw.get("endTime")):
        return None
    return Appointment(
        appointment_id=str(raw.get("appointmentId") or raw.get("_id") or ""),
        service_code=service_code,
        appointment_date=str(raw["appointmentDate"]),
        start_time=str(raw["startTime"]),
        end_time=str(raw["endTime"]),
        duration=_int(raw.get("duration")),
        status=_str(raw.get("status")),
        client_id=_str(raw.get("clientId")) or client_id,
        midwife_id=_str(raw.get("midwifeId")) or midwife_id,
        class_no=_str(raw.get("classNo")),
    )


def map_appointment_buckets(
    raw: Any,
    midwife_id: str | None = None,
    client_id: str | None = None,
) -> list[Appointment]:
    """Flatten a {serviceCode: [appointment, ...]} map."""
    if not isinstance(raw, dict):
        return []
    appointments: list[Appointment] = []
    for service_code, items in raw.items():
        if not isinstance(items, list):
            continue
        for item in items:
            apt = map_appointment(item, str(service_code), midwife_id, client_id)
            if apt is not None:
                appointments.append(apt)
    return appointments


def map_monthly_view(raw: Any, midwife_id: str) -> dict[str, list[Appointment]]:
    if not isinstance(raw, dict):
        return {}
    return {
        str(month): map_appointment_buckets(bucket, midwife_id=midwife_id)
        for month, bucket in raw.items()
        if isinstance(bucket, dict)
    }


def map_lead(raw: Any) -> Lead | None:
    if not isinstance(raw, dict) or not raw.get("_id"):
        return None
    address_details = raw.get("selectedAddressDetails") or {}
    address = None
    if isinstance(address_details, dict):
        details = address_details.get("details") or {}
        address = (details.get("formattedAddress") if isinstance(details, dict) else None) or address_details.get(
            "address"
        )
    return Lead(
        id=str(raw["_id"]),
        midwife_id=str(raw.get("midwifeId") or ""),
        full_name=str(raw.get("fullName") or ""),
        date=str(raw.get("date") or ""),
        user_id=_str(raw.get("userId")),
        email=_str(raw.get("email")),
        phone_number=_str(raw.get("phoneNumber")),
        insurance_number=_str(raw.get("insuranceNumber")),
        insurance_company=_str(raw.get("insuranceCompany")),
        insurance_type=_str(raw.get("insuranceType")),
        expected_delivery_date=_str(raw.get("expectedDeliveryDate")),
        address=_str(address),
        selected_slot=_str(raw.get("selectedSlot")),
        status=_str(raw.get("status")),
        created_at=_str(raw.get("createdAt")),
    )


def map_phone_booking(raw: Any) -> PhoneBooking | None:
    if not isinstance(raw, dict) or not raw.get("_id"):
        return None
    return PhoneBooking(
        id=str(raw["_id"]),
        midwife_id=str(raw.get("midwifeId") or ""),
        full_name=str(raw.get("fullName") or ""),
        date=str(raw.get("date") or ""),
        selected_slot=str(raw.get("selectedSlot") or ""),
        status=str(raw.get("status") or "active"),
        user_id=_str(raw.get("userId")),
        email=_str(raw.get("email")),
        phone=_str(raw.get("phone")),
        meeting_link=_str(raw.get("meetingLink")),
        created_at=_str(raw.get("createdAt")),
    )


def map_private_booking(raw: Any) -> PrivateServiceBooking | None:
    if not isinstance(raw, dict) or not raw.get("_id"):
        return None
    sessions = tuple(
        CourseSession(
            session_number=_int(item.get("sessionNumber")) or 0,
            date=str(item.get("date") or ""),
            day=str(item.get("day") or ""),
            start_time=str(item.get("startTime") or ""),
            end_time=str(item.get("endTime") or ""),
        )
        for item in raw.get("courseSessions") or []
        if isinstance(item, dict)
    )
    return PrivateServiceBooking(
        id=str(raw["_id"]),
        midwife_id=str(raw.get("midwifeId") or ""),
        service_name=str(raw.get("serviceName") or ""),
        booking_type=str(raw.get("bookingType") or "single"),
        status=str(raw.get("status") or "active"),
        selected_date=_str(raw.get("selectedDate")),
        selected_slot=_str(raw.get("selectedSlot")),
        selected_day=_str(raw.get("selectedDay")),
        service_id=_str(raw.get("serviceId")),
        service_type=_str(raw.get("serviceType")),
        service_mode=_str(raw.get("serviceMode")),
        duration=_int(raw.get("duration")),
        price=_float(raw.get("price")),
        first_name=_str(raw.get("firstName")),
        last_name=_str(raw.get("lastName")),
        email=_str(raw.get("email")),
        phone=_str(raw.get("phone")),
        user_id=_str(raw.get("userId")),
        course_sessions=sessions,
        created_at=_str(raw.get("createdAt")),
    )


def map_client_request(raw: Any) -> ClientRequest | None:
    if not isinstance(raw, dict) or not raw.get("_id"):
        return None
    return ClientRequest(
        id=str(raw["_id"]),
        request_type=str(raw.get("requestType") or ""),
        midwife_id=str(raw.get("midwifeId") or ""),
        client_id=str(raw.get("clientId") or ""),
        service_code=str(raw.get("serviceCode") or ""),
        appointment_id=str(raw.get("appointmentId") or ""),
        status=str(raw.get("status") or "pending"),
        suggested_date=_str(raw.get("suggestedDate")),
        suggested_start_time=_str(raw.get("suggestedStartTime")),
        suggested_end_time=_str(raw.get("suggestedEndTime")),
        note=str(raw.get("note") or ""),
        created_at=_str(raw.get("createdAt")),
    )


def map_client_names(raw: Any) -> dict[str, ClientName]:
    if not isinstance(raw, dict):
        return {}
    return {
        str(user_id): ClientName(
            name=str(detail.get("name") or ""),
            email=_str(detail.get("email")),
            role=_str(detail.get("role")),
        )
        for user_id, detail in raw.items()
        if isinstance(detail, dict)
    }


def map_login(token: Any, user: Any) -> LoginResult | None:
    if not token or not isinstance(user, dict) or not user.get("id"):
        return None
    return LoginResult(
        token=str(token),
        user=AuthenticatedUser(
            id=str(user["id"]),
            email=str(user.get("email") or ""),
            role=str(user.get("role") or ""),
            username=_str(user.get("username")),
        ),
    )
