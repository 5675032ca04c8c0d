from __future__ import annotations

from dataclasses import dataclass, field

from midwife_desk.domain.entities.timetable import Timetable


@dataclass(frozen=True)
class MidwifeProfile:
    id: str
    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    timetable: Timetable | None = None
    # service code -> title, as configured on the midwife's profile
    service_titles: dict[str, str] = field(default_factory=dict)
    is_profile_complete: bool = False
    midwife_status: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or "—"


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    role: str
    username: str | None = None


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: AuthenticatedUser
