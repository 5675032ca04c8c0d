from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from midwife_desk.application.utils.dates import parse_dmy


def parse_day(value: str) -> date:
    """Parse a dd/mm/yyyy request value. Raises ValueError, which routes turn into a 400."""
    day = parse_dmy(value)
    if day is None:
        raise ValueError(f"Invalid date {value!r}, expected dd/mm/yyyy")
    return day


class MessageResponseSchema(BaseModel):
    message: str


# Scheduling

class TimeSlotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: str
    end_time: str
    label: str


class TimeRangeSchema(BaseModel):
    start: str
    end: str
    label: str


class ProfileSchema(BaseModel):
    id: str
    user_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    timetable: dict[str, dict[str, list[TimeSlotSchema]]] = Field(default_factory=dict)
    service_titles: dict[str, str] = Field(default_factory=dict)
    is_profile_complete: bool = False
    midwife_status: bool = False


class ValidDatesResponseSchema(BaseModel):
    service_code: str
    year: int
    month: int
    dates: list[str]


class AvailableSlotsResponseSchema(BaseModel):
    date: str
    service_code: str
    slots: list[TimeSlotSchema]


class FreeRangesResponseSchema(BaseModel):
    date: str
    ranges: list[TimeRangeSchema]
    service_code: str | None = None
    time_options: list[str] = Field(default_factory=list)


# Appointments

class AppointmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_id: str
    service_code: str
    appointment_date: str
    start_time: str
    end_time: str
    duration: int | None = None
    # attribute reads use the normalized status, dict input the plain key
    status: str = Field(validation_alias=AliasChoices("normalized_status", "status"))
    client_id: str | None = None
    midwife_id: str | None = None
    class_no: str | None = None
    can_edit: bool
    can_cancel: bool
    can_reactivate: bool


class CreateAppointmentRequestSchema(BaseModel):
    client_id: str
    service_code: str
    date: str  # dd/mm/yyyy
    start_time: str
    end_time: str | None = None
    custom: bool = False


class ChangeAppointmentRequestSchema(BaseModel):
    date: str  # dd/mm/yyyy
    start_time: str
    end_time: str | None = None
    custom: bool = False


class BulkCancelRequestSchema(BaseModel):
    date: str  # dd/mm/yyyy


class CancellableDatesResponseSchema(BaseModel):
    dates: list[str]


class DaySectionSchema(BaseModel):
    day: str
    appointments: list[AppointmentSchema]


class PatientMonthViewSchema(BaseModel):
    year: int
    month: int
    status: str
    counts: dict[str, int]
    sections: list[DaySectionSchema]


# Bookings

class LeadSchema(BaseModel):
    id: str
    full_name: str
    date: str
    start_time: str
    end_time: str
    address: str
    user_id: str | None = None
    email: str | None = None
    phone_number: str | None = None
    insurance_number: str | None = None
    insurance_company: str | None = None
    insurance_type: str | None = None
    expected_delivery_date: str | None = None
    status: str | None = None
    created_at: str | None = None


class LeadsResponseSchema(BaseModel):
    upcoming: list[LeadSchema]
    past: list[LeadSchema]


class PhoneBookingSchema(BaseModel):
    id: str
    full_name: str
    date: str
    start_time: str
    end_time: str
    status: str
    user_id: str | None = None
    email: str | None = None
    phone: str | None = None
    meeting_link: str | None = None
    created_at: str | None = None


class PhoneBookingsResponseSchema(BaseModel):
    upcoming: list[PhoneBookingSchema]
    past: list[PhoneBookingSchema]
    cancelled: list[PhoneBookingSchema]


class CourseSessionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_number: int
    date: str
    day: str
    start_time: str
    end_time: str


class PrivateBookingSchema(BaseModel):
    id: str
    full_name: str
    service_name: str
    booking_type: str
    status: str
    date: str | None = None
    start_time: str
    end_time: str
    service_type: str | None = None
    service_mode: str | None = None
    duration: int | None = None
    price: float | None = None
    email: str | None = None
    phone: str | None = None
    course_sessions: list[CourseSessionSchema] = Field(default_factory=list)
    created_at: str | None = None


class PrivateBookingsResponseSchema(BaseModel):
    upcoming: list[PrivateBookingSchema]
    past: list[PrivateBookingSchema]
    cancelled: list[PrivateBookingSchema]


# Client requests

class ClientRequestSchema(BaseModel):
    id: str
    request_type: str
    status: str
    client_id: str
    client_name: str | None = None
    client_email: str | None = None
    service_code: str
    appointment_id: str
    suggested_date: str | None = None
    suggested_start_time: str | None = None
    suggested_end_time: str | None = None
    note: str = ""
    created_at: str | None = None


class RescheduleCheckSchema(BaseModel):
    valid: bool
    reason: str | None = None


class ApproveRequestSchema(BaseModel):
    alternative_date: str | None = None  # dd/mm/yyyy
    alternative_start_time: str | None = None
    alternative_end_time: str | None = None


# Account

class LoginRequestSchema(BaseModel):
    email: str
    password: str


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str
    username: str | None = None


class LoginResponseSchema(BaseModel):
    token: str
    user: UserSchema


class ForgotPasswordRequestSchema(BaseModel):
    email: str
