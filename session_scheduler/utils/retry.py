from __future__ import annotations

from tenacity import (
    AsyncRetrying,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

import httpx

from session_scheduler.schemas.enums import SilentAuthOutcome


def with_retry(max_retries: int = 3, backoff_factor: float = 0.5):
    """Retry token endpoint calls on connection errors and timeouts.

    HTTP error responses are not retried; the authenticator turns them into AuthError.
    """
    return retry(
        retry=retry_if_exception_type((httpx.TransportError, httpx.TimeoutException)),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff_factor, min=0.5, max=30),
        reraise=True,
    )


def silent_auth_retrying(attempts: int = 1, backoff_seconds: float = 0.5) -> AsyncRetrying:
    """Retry policy for silent auth attempts rejected by the provider.

    Only FAILED outcomes are retried; once attempts run out the last outcome
    is returned rather than raising RetryError.
    """
    return AsyncRetrying(
        retry=retry_if_result(lambda outcome: outcome is SilentAuthOutcome.FAILED),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=backoff_seconds, max=30),
        retry_error_callback=lambda state: state.outcome.result(),
    )
