from fastapi import HTTPException

from midwife_desk.application.exceptions import (
    AccessDeniedError,
    ApiContractError,
    ApiRejectedError,
    ApiUpstreamError,
    NotFoundError,
)

# Exceptions the routes translate into HTTP errors
HANDLED_ERRORS = (
    ValueError,
    NotFoundError,
    AccessDeniedError,
    ApiRejectedError,
    ApiUpstreamError,
    ApiContractError,
)


def to_http_exception(e: Exception) -> HTTPException:
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, AccessDeniedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, ApiRejectedError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))
