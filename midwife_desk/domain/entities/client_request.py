from __future__ import annotations

from dataclasses import dataclass

REQUEST_TYPE_EDIT = "edit"
REQUEST_TYPE_CANCEL = "cancelled"

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"


@dataclass(frozen=True)
class ClientRequest:
    id: str
    request_type: str  # "edit" (reschedule) or "cancelled"
    midwife_id: str
    client_id: str
    service_code: str
    appointment_id: str
    status: str = REQUEST_PENDING
    suggested_date: str | None = None  # dd/mm/yyyy
    suggested_start_time: str | None = None
    suggested_end_time: str | None = None
    note: str = ""
    created_at: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == REQUEST_PENDING

    @property
    def is_reschedule(self) -> bool:
        return self.request_type == REQUEST_TYPE_EDIT


@dataclass(frozen=True)
class ClientName:
    name: str
    email: str | None = None
    role: str | None = None
