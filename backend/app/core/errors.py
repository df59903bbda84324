"""
Domain errors for the ticketing API.

Services raise these; the handlers registered in ``app.main`` turn them
into the ``{success: false, message, error}`` envelope the mobile client
expects. ``error`` carries the taxonomy code, ``message`` is shown to the
user verbatim.
"""

from enum import Enum

from fastapi import status


class ErrorCode(str, Enum):
    NOT_FOUND = "NotFound"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    INVALID_CODE = "InvalidCode"
    ALREADY_USED = "AlreadyUsed"
    INVALID_STATE = "InvalidState"
    INVALID_TRANSITION = "InvalidTransition"
    VALIDATION_ERROR = "ValidationError"
    FORBIDDEN = "Forbidden"
    CONFLICT = "Conflict"
    INTERNAL_ERROR = "InternalError"


class AppError(Exception):
    """Base error with an HTTP status, taxonomy code and user-safe message."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFound(AppError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class CapacityExceeded(AppError):
    """Raised when a purchase would push ``sold`` past a ticket type's capacity."""

    code = ErrorCode.CAPACITY_EXCEEDED
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidCode(AppError):
    code = ErrorCode.INVALID_CODE
    status_code = status.HTTP_400_BAD_REQUEST


class AlreadyUsed(AppError):
    code = ErrorCode.ALREADY_USED
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidState(AppError):
    code = ErrorCode.INVALID_STATE
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransition(AppError):
    code = ErrorCode.INVALID_TRANSITION
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(AppError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(AppError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(AppError):
    code = ErrorCode.CONFLICT
    status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    code = ErrorCode.INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
