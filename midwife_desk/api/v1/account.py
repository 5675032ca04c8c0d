from fastapi import APIRouter, Depends, HTTPException

from midwife_desk.api.v1.errors import HANDLED_ERRORS, to_http_exception
from midwife_desk.api.v1.scheduling import profile_schema
from midwife_desk.api.v1.schemas import (
    ForgotPasswordRequestSchema,
    LoginRequestSchema,
    LoginResponseSchema,
    MessageResponseSchema,
    ProfileSchema,
    UserSchema,
)
from midwife_desk.application.exceptions import ApiRejectedError
from midwife_desk.application.use_cases.account import AccountUseCase
from midwife_desk.wiring.dependencies import get_account_use_case

router = APIRouter()


@router.post("/login", response_model=LoginResponseSchema)
def login(
    req: LoginRequestSchema,
    uc: AccountUseCase = Depends(get_account_use_case),
):
    try:
        result = uc.login(req.email, req.password)
    except ApiRejectedError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return LoginResponseSchema(token=result.token, user=UserSchema.model_validate(result.user))


@router.post("/forgot-password", response_model=MessageResponseSchema)
def forgot_password(
    req: ForgotPasswordRequestSchema,
    uc: AccountUseCase = Depends(get_account_use_case),
):
    try:
        message = uc.forgot_password(req.email)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return MessageResponseSchema(message=message)


@router.get("/users/{user_id}/profile", response_model=ProfileSchema)
def profile_for_user(
    user_id: str,
    uc: AccountUseCase = Depends(get_account_use_case),
):
    try:
        profile = uc.profile_for_user(user_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return profile_schema(profile)


@router.get("/midwives", response_model=list[ProfileSchema])
def list_midwives(uc: AccountUseCase = Depends(get_account_use_case)):
    try:
        profiles = uc.list_midwives()
    except HANDLED_ERRORS as e:
        raise to_http_exception(e) from e
    return [profile_schema(profile) for profile in profiles]
