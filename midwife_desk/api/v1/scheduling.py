from fastapi import APIRouter, Depends, Query

from midwife_desk.api.v1.errors import HANDLED_ERRORS, to_http_exception
from midwife_desk.api.v1.schemas import (
    AvailableSlotsResponseSchema,
    FreeRangesResponseSchema,
    ProfileSchema,
    TimeRangeSchema,
    TimeSlotSchema,
    ValidDatesResponseSchema,
    parse_day,
)
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.application.utils.dates import format_minutes, to_dmy
from midwife_desk.domain.entities.profile import MidwifeProfile
from midwife_desk.wiring.dependencies import get_scheduling_use_case

router = APIRouter(prefix="/midwives/{midwife_id}")


def profile_schema(profile: MidwifeProfile) -> ProfileSchema:
    timetable = {}
    if profile.timetable is not None:
        timetable = {
            weekday: {
                code: [TimeSlotSchema.model_validate(slot) for slot in slots]
                for code, slots in services.items()
            }
            for weekday, services in profile.timetable.days.items()
        }
    return ProfileSchema(
        id=profile.id,
        user_id=profile.user_id,
        name=profile.display_name,
        email=profile.email,
        phone=profile.phone,
        timetable=timetable,
        service_titles=profile.service_titles,
        is_profile_complete=profile.is_profile_complete,
        midwife_status=profile.midwife_status,
    )


@router.get("/profile", response_model=ProfileSchema)
def get_profile(
    midwife_id: str,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        profile = uc.load_profile(midwife_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return profile_schema(profile)


@router.get("/valid-dates", response_model=ValidDatesResponseSchema)
def valid_dates(
    midwife_id: str,
    service_code: str,
    year: int,
    month: int = Query(ge=1, le=12),
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        dates = uc.valid_dates(midwife_id, service_code, year, month)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return ValidDatesResponseSchema(service_code=service_code, year=year, month=month, dates=dates)


@router.get("/slots", response_model=AvailableSlotsResponseSchema)
def available_slots(
    midwife_id: str,
    service_code: str,
    date: str,
    exclude_appointment_id: str | None = None,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        day = parse_day(date)
        slots = uc.available_slots(midwife_id, service_code, day, exclude_appointment_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return AvailableSlotsResponseSchema(
        date=to_dmy(day),
        service_code=service_code,
        slots=[TimeSlotSchema.model_validate(slot) for slot in slots],
    )


@router.get("/free-ranges", response_model=FreeRangesResponseSchema)
def free_ranges(
    midwife_id: str,
    date: str,
    service_code: str | None = None,
    exclude_appointment_id: str | None = None,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    """Free windows of the day and, for a service, the custom start times that fit its duration."""
    try:
        day = parse_day(date)
        ranges = uc.free_time_ranges(midwife_id, day, exclude_appointment_id)
        options = (
            uc.custom_time_options(midwife_id, service_code, day, exclude_appointment_id)
            if service_code
            else []
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return FreeRangesResponseSchema(
        date=to_dmy(day),
        ranges=[
            TimeRangeSchema(start=format_minutes(r.start), end=format_minutes(r.end), label=r.label)
            for r in ranges
        ],
        service_code=service_code,
        time_options=options,
    )
