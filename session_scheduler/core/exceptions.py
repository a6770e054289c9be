from __future__ import annotations

from session_scheduler.schemas.enums import ErrorCode


class SessionSchedulerError(Exception):
    """Base exception for all session scheduler errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class AuthError(SessionSchedulerError):
    error_code = ErrorCode.AUTH_FAILED


class ExpirationError(SessionSchedulerError):
    error_code = ErrorCode.EXPIRATION_MISSING


class SchedulingError(SessionSchedulerError):
    error_code = ErrorCode.SCHEDULING_MISUSE
