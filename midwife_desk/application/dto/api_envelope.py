from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiEnvelope(BaseModel):
    """Response body shared by every midwife API endpoint."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    message: Any = None
    error: Any = None
    details: Any = None
    data: Any = None
    # login only
    token: str | None = None
    user: dict[str, Any] | None = None

    def error_message(self, default: str) -> str:
        for value in (self.message, self.error, self.details):
            if isinstance(value, str) and value.strip():
                return value
        return default

    def success_message(self, default: str) -> str:
        if isinstance(self.message, str) and self.message.strip():
            return self.message
        return default

    def data_list(self) -> list[Any]:
        return self.data if isinstance(self.data, list) else []

    def data_dict(self) -> dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}
