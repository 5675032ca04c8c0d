from fastapi import APIRouter, Depends

from midwife_desk.api.v1.errors import HANDLED_ERRORS, to_http_exception
from midwife_desk.api.v1.schemas import (
    CourseSessionSchema,
    LeadSchema,
    LeadsResponseSchema,
    PhoneBookingSchema,
    PhoneBookingsResponseSchema,
    PrivateBookingSchema,
    PrivateBookingsResponseSchema,
)
from midwife_desk.application.use_cases.bookings_overview import (
    BookingsOverviewUseCase,
    lead_address,
    private_full_name,
    private_schedule,
)
from midwife_desk.application.utils.dates import split_slot
from midwife_desk.domain.entities.bookings import Lead, PhoneBooking, PrivateServiceBooking
from midwife_desk.wiring.dependencies import get_bookings_overview_use_case

router = APIRouter(prefix="/midwives/{midwife_id}")


def lead_schema(lead: Lead) -> LeadSchema:
    start_time, end_time = split_slot(lead.selected_slot)
    return LeadSchema(
        id=lead.id,
        full_name=lead.full_name,
        date=lead.date,
        start_time=start_time,
        end_time=end_time,
        address=lead_address(lead),
        user_id=lead.user_id,
        email=lead.email,
        phone_number=lead.phone_number,
        insurance_number=lead.insurance_number,
        insurance_company=lead.insurance_company,
        insurance_type=lead.insurance_type,
        expected_delivery_date=lead.expected_delivery_date,
        status=lead.status,
        created_at=lead.created_at,
    )


def phone_booking_schema(booking: PhoneBooking) -> PhoneBookingSchema:
    start_time, end_time = split_slot(booking.selected_slot)
    return PhoneBookingSchema(
        id=booking.id,
        full_name=booking.full_name,
        date=booking.date,
        start_time=start_time,
        end_time=end_time,
        status=booking.status,
        user_id=booking.user_id,
        email=booking.email,
        phone=booking.phone,
        meeting_link=booking.meeting_link,
        created_at=booking.created_at,
    )


def private_booking_schema(booking: PrivateServiceBooking) -> PrivateBookingSchema:
    booking_date, slot = private_schedule(booking)
    start_time, end_time = split_slot(slot)
    return PrivateBookingSchema(
        id=booking.id,
        full_name=private_full_name(booking),
        service_name=booking.service_name,
        booking_type=booking.booking_type,
        status=booking.status,
        date=booking_date,
        start_time=start_time,
        end_time=end_time,
        service_type=booking.service_type,
        service_mode=booking.service_mode,
        duration=booking.duration,
        price=booking.price,
        email=booking.email,
        phone=booking.phone,
        course_sessions=[CourseSessionSchema.model_validate(s) for s in booking.course_sessions],
        created_at=booking.created_at,
    )


@router.get("/leads", response_model=LeadsResponseSchema)
def leads(
    midwife_id: str,
    uc: BookingsOverviewUseCase = Depends(get_bookings_overview_use_case),
):
    try:
        partition = uc.leads(midwife_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return LeadsResponseSchema(
        upcoming=[lead_schema(lead) for lead in partition.upcoming],
        past=[lead_schema(lead) for lead in partition.past],
    )


@router.get("/phone-bookings", response_model=PhoneBookingsResponseSchema)
def phone_bookings(
    midwife_id: str,
    uc: BookingsOverviewUseCase = Depends(get_bookings_overview_use_case),
):
    try:
        partition = uc.phone_bookings(midwife_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return PhoneBookingsResponseSchema(
        upcoming=[phone_booking_schema(b) for b in partition.upcoming],
        past=[phone_booking_schema(b) for b in partition.past],
        cancelled=[phone_booking_schema(b) for b in partition.cancelled],
    )


@router.get("/private-bookings", response_model=PrivateBookingsResponseSchema)
def private_bookings(
    midwife_id: str,
    uc: BookingsOverviewUseCase = Depends(get_bookings_overview_use_case),
):
    try:
        partition = uc.private_bookings(midwife_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return PrivateBookingsResponseSchema(
        upcoming=[private_booking_schema(b) for b in partition.upcoming],
        past=[private_booking_schema(b) for b in partition.past],
        cancelled=[private_booking_schema(b) for b in partition.cancelled],
    )
