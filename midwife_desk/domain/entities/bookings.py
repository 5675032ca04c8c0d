from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Lead:
    id: str
    midwife_id: str
    full_name: str
    date: str  # dd/mm/yyyy
    user_id: str | None = None
    email: str | None = None
    phone_number: str | None = None
    insurance_number: str | None = None
    insurance_company: str | None = None
    insurance_type: str | None = None  # "government", "private" or free text
    expected_delivery_date: str | None = None  # dd/mm/yyyy
    address: str | None = None
    selected_slot: str | None = None  # "HH:MM-HH:MM"
    status: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class PhoneBooking:
    id: str
    midwife_id: str
    full_name: str
    date: str  # dd/mm/yyyy
    selected_slot: str  # "HH:MM-HH:MM"
    status: str  # "active", "completed", "cancelled"
    user_id: str | None = None
    email: str | None = None
    phone: str | None = None
    meeting_link: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class CourseSession:
    session_number: int
    date: str  # dd/mm/yyyy
    day: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class PrivateServiceBooking:
    id: str
    midwife_id: str
    service_name: str
    booking_type: str  # "single" or "course"
    status: str  # "active", "completed", "cancelled", "pending"
    selected_date: str | None = None  # dd/mm/yyyy
    selected_slot: str | None = None  # "HH:MM-HH:MM"
    selected_day: str | None = None
    service_id: str | None = None
    service_type: str | None = None  # "In persona" or "Videocall"
    service_mode: str | None = None  # "Individual" or "Group"
    duration: int | None = None
    price: float | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    user_id: str | None = None
    course_sessions: tuple[CourseSession, ...] = field(default_factory=tuple)
    created_at: str | None = None

    @property
    def is_course(self) -> bool:
        return self.booking_type == "course" and bool(self.course_sessions)
