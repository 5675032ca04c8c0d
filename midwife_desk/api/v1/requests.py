from fastapi import APIRouter, Depends

from midwife_desk.api.v1.errors import HANDLED_ERRORS, to_http_exception
from midwife_desk.api.v1.schemas import (
    ApproveRequestSchema,
    ClientRequestSchema,
    MessageResponseSchema,
    RescheduleCheckSchema,
    parse_day,
)
from midwife_desk.application.use_cases.client_requests import ClientRequestsUseCase, ClientRequestView
from midwife_desk.wiring.dependencies import get_client_requests_use_case

router = APIRouter(prefix="/midwives/{midwife_id}/requests")


def request_schema(view: ClientRequestView) -> ClientRequestSchema:
    request = view.request
    return ClientRequestSchema(
        id=request.id,
        request_type=request.request_type,
        status=request.status,
        client_id=request.client_id,
        client_name=view.client.name if view.client else None,
        client_email=view.client.email if view.client else None,
        service_code=request.service_code,
        appointment_id=request.appointment_id,
        suggested_date=request.suggested_date,
        suggested_start_time=request.suggested_start_time,
        suggested_end_time=request.suggested_end_time,
        note=request.note,
        created_at=request.created_at,
    )


@router.get("", response_model=list[ClientRequestSchema])
def list_requests(
    midwife_id: str,
    status: str = "all",
    uc: ClientRequestsUseCase = Depends(get_client_requests_use_case),
):
    try:
        views = uc.list_requests(midwife_id, status)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return [request_schema(view) for view in views]


@router.get("/{request_id}/check", response_model=RescheduleCheckSchema)
def check_reschedule(
    midwife_id: str,
    request_id: str,
    uc: ClientRequestsUseCase = Depends(get_client_requests_use_case),
):
    try:
        check = uc.validate_reschedule(midwife_id, uc.find(midwife_id, request_id))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return RescheduleCheckSchema(valid=check.valid, reason=check.reason)


@router.post("/{request_id}/approve", response_model=MessageResponseSchema)
def approve_request(
    midwife_id: str,
    request_id: str,
    req: ApproveRequestSchema | None = None,
    uc: ClientRequestsUseCase = Depends(get_client_requests_use_case),
):
    req = req or ApproveRequestSchema()
    try:
        message = uc.approve(
            midwife_id,
            request_id,
            alternative_date=parse_day(req.alternative_date) if req.alternative_date else None,
            alternative_start_time=req.alternative_start_time,
            alternative_end_time=req.alternative_end_time,
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.post("/{request_id}/reject", response_model=MessageResponseSchema)
def reject_request(
    midwife_id: str,
    request_id: str,
    uc: ClientRequestsUseCase = Depends(get_client_requests_use_case),
):
    try:
        message = uc.reject(midwife_id, request_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)
