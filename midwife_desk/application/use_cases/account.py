from __future__ import annotations

import logging
import re

from midwife_desk.application.exceptions import AccessDeniedError
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.domain.entities.profile import LoginResult, MidwifeProfile

MIDWIFE_ROLE = "midwife"

_EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


def normalize_email(email: str | None) -> str:
    value = (email or "").strip()
    if not value:
        raise ValueError("Email is required")
    if not _EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value


class AccountUseCase:
    def __init__(self, api: MidwifeApiPort) -> None:
        self._api = api
        self._logger = logging.getLogger(__name__)

    def login(self, email: str, password: str) -> LoginResult:
        email = normalize_email(email)
        if not password:
            raise ValueError("Password is required")

        result = self._api.login(email, password)
        if result.user.role != MIDWIFE_ROLE:
            self._logger.warning("Login refused for role", extra={"reason": result.user.role})
            raise AccessDeniedError(f"You are registered as {result.user.role}. This is the midwife dashboard")
        self._logger.info("Midwife logged in", extra={"reason": result.user.id})
        return result

    def forgot_password(self, email: str) -> str:
        return self._api.forgot_password(normalize_email(email))

    def profile_for_user(self, user_id: str) -> MidwifeProfile:
        return self._api.get_profile_by_user_id(user_id)

    def list_midwives(self) -> list[MidwifeProfile]:
        return self._api.list_midwives()
