class ApiUpstreamError(RuntimeError):
    """Raised when the midwife API fails (network errors, timeouts, HTTP error status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiRejectedError(RuntimeError):
    """Raised when the midwife API answers with success=false."""
    pass


class ApiContractError(RuntimeError):
    """Raised when a required response body is missing or malformed."""
    pass


class SchedulingValidationError(ValueError):
    """Raised when a requested date, slot or custom time cannot be booked."""
    pass


class NotFoundError(LookupError):
    """Raised when an appointment or client request does not exist for the midwife."""
    pass


class AccessDeniedError(PermissionError):
    """Raised when an account's role may not use the midwife desk."""
    pass
