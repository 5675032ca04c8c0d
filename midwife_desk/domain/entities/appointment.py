from __future__ import annotations

from dataclasses import dataclass

STATUS_ACTIVE = "active"
STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"
STATUSES = (STATUS_ACTIVE, STATUS_PENDING, STATUS_CANCELLED)


@dataclass(frozen=True)
class Appointment:
    appointment_id: str
    service_code: str
    appointment_date: str  # dd/mm/yyyy
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    duration: int | None = None  # minutes
    status: str | None = None  # missing status reads as active
    client_id: str | None = None
    midwife_id: str | None = None
    class_no: str | None = None

    @property
    def normalized_status(self) -> str:
        return (self.status or STATUS_ACTIVE).strip().lower()

    @property
    def is_cancelled(self) -> bool:
        return self.normalized_status == STATUS_CANCELLED

    @property
    def can_edit(self) -> bool:
        return not self.is_cancelled

    @property
    def can_cancel(self) -> bool:
        return not self.is_cancelled

    @property
    def can_reactivate(self) -> bool:
        return self.is_cancelled

    @property
    def ref(self) -> AppointmentRef:
        return AppointmentRef(
            appointment_id=self.appointment_id,
            service_code=self.service_code,
            midwife_id=self.midwife_id,
            client_id=self.client_id,
        )


@dataclass(frozen=True)
class AppointmentRef:
    """What the API needs to address an existing appointment."""

    appointment_id: str
    service_code: str
    midwife_id: str | None = None
    client_id: str | None = None
