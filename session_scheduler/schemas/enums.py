from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    AUTH_FAILED = "AUTH_FAILED"
    EXPIRATION_MISSING = "EXPIRATION_MISSING"
    SCHEDULING_MISUSE = "SCHEDULING_MISUSE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class JobName(str, Enum):
    RENEW = "renew_job"
    EXPIRE = "expire_job"


class AuthFlow(str, Enum):
    """Authentication flows the session service knows how to run."""

    RENEWAL = "renewal"
    SILENT = "silent"


class SilentAuthOutcome(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class RenewalOutcome(str, Enum):
    RENEWED = "RENEWED"
    RESET = "RESET"


class ExpirationOutcome(str, Enum):
    REPRIEVED = "REPRIEVED"
    EXPIRED = "EXPIRED"
