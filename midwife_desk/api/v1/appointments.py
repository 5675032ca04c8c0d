from fastapi import APIRouter, Depends, Query

from midwife_desk.api.v1.errors import HANDLED_ERRORS, to_http_exception
from midwife_desk.api.v1.schemas import (
    AppointmentSchema,
    BulkCancelRequestSchema,
    CancellableDatesResponseSchema,
    ChangeAppointmentRequestSchema,
    CreateAppointmentRequestSchema,
    DaySectionSchema,
    MessageResponseSchema,
    PatientMonthViewSchema,
    parse_day,
)
from midwife_desk.application.use_cases.bulk_cancel import BulkCancelUseCase
from midwife_desk.application.use_cases.patient_appointments import PatientAppointmentsUseCase
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.wiring.dependencies import (
    get_bulk_cancel_use_case,
    get_patient_appointments_use_case,
    get_scheduling_use_case,
)

router = APIRouter(prefix="/midwives/{midwife_id}")


@router.post("/appointments", response_model=MessageResponseSchema, status_code=201)
def create_appointment(
    midwife_id: str,
    req: CreateAppointmentRequestSchema,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        message = uc.create(
            midwife_id=midwife_id,
            client_id=req.client_id,
            service_code=req.service_code,
            day=parse_day(req.date),
            start_time=req.start_time,
            end_time=req.end_time,
            custom=req.custom,
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.put("/appointments/{appointment_id}", response_model=MessageResponseSchema)
def edit_appointment(
    midwife_id: str,
    appointment_id: str,
    req: ChangeAppointmentRequestSchema,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        message = uc.edit(
            midwife_id, appointment_id, parse_day(req.date), req.start_time, req.end_time, req.custom
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.post("/appointments/{appointment_id}/cancel", response_model=MessageResponseSchema)
def cancel_appointment(
    midwife_id: str,
    appointment_id: str,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        message = uc.cancel(midwife_id, appointment_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.post("/appointments/{appointment_id}/reactivate", response_model=MessageResponseSchema)
def reactivate_appointment(
    midwife_id: str,
    appointment_id: str,
    req: ChangeAppointmentRequestSchema,
    uc: AppointmentSchedulingUseCase = Depends(get_scheduling_use_case),
):
    try:
        message = uc.reactivate(
            midwife_id, appointment_id, parse_day(req.date), req.start_time, req.end_time, req.custom
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.get("/bulk-cancel/dates", response_model=CancellableDatesResponseSchema)
def cancellable_dates(
    midwife_id: str,
    uc: BulkCancelUseCase = Depends(get_bulk_cancel_use_case),
):
    try:
        dates = uc.cancellable_dates(midwife_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return CancellableDatesResponseSchema(dates=dates)


@router.get("/bulk-cancel/appointments", response_model=list[AppointmentSchema])
def appointments_to_cancel(
    midwife_id: str,
    date: str,
    uc: BulkCancelUseCase = Depends(get_bulk_cancel_use_case),
):
    try:
        appointments = uc.appointments_on(midwife_id, parse_day(date))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return [AppointmentSchema.model_validate(apt) for apt in appointments]


@router.post("/bulk-cancel", response_model=MessageResponseSchema)
def bulk_cancel(
    midwife_id: str,
    req: BulkCancelRequestSchema,
    uc: BulkCancelUseCase = Depends(get_bulk_cancel_use_case),
):
    try:
        message = uc.execute(midwife_id, parse_day(req.date))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.get("/clients/{client_id}/appointments", response_model=PatientMonthViewSchema)
def patient_appointments(
    midwife_id: str,
    client_id: str,
    year: int,
    month: int = Query(ge=1, le=12),
    status: str = "all",
    uc: PatientAppointmentsUseCase = Depends(get_patient_appointments_use_case),
):
    try:
        view = uc.month_view(midwife_id, client_id, year, month, status)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return PatientMonthViewSchema(
        year=view.year,
        month=view.month,
        status=view.status,
        counts=view.counts,
        sections=[
            DaySectionSchema(
                day=section.day,
                appointments=[AppointmentSchema.model_validate(apt) for apt in section.appointments],
            )
            for section in view.sections
        ],
    )
