"""Typed failures raised by services; main.py maps them to JSON responses."""
from typing import Any


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidDateRange(ValidationError):
    default_message = "Invalid date range"


class InvalidStatus(ValidationError):
    default_message = "Invalid status"


class CapacityExceeded(ValidationError):
    def __init__(self, max_guests: int, requested_guests: int):
        super().__init__(
            f"Property can accommodate maximum {max_guests} guests",
            max_guests=max_guests,
            requested_guests=requested_guests,
        )


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class InternalError(AppError):
    status_code = 500
