from __future__ import annotations

from session_scheduler.clients.scheduler import JobScheduler
from session_scheduler.config import Settings
from session_scheduler.core.logging import get_logger
from session_scheduler.schemas.enums import (
    AuthFlow,
    ExpirationOutcome,
    JobName,
    RenewalOutcome,
    SilentAuthOutcome,
)
from session_scheduler.services.lifecycle import BaseSessionLifecycle, SessionLifecycle
from session_scheduler.services.session_boundary import SessionBoundary
from session_scheduler.utils.clock import Clock, now
from session_scheduler.utils.expiration import get_session_expiration, remaining_seconds
from session_scheduler.utils.retry import silent_auth_retrying

logger = get_logger(__name__)

RENEW_JOB = JobName.RENEW.value
EXPIRE_JOB = JobName.EXPIRE.value


class SessionLifecycleController:
    """Keeps an authenticated session alive until its token expires, then ends it.

    Wraps a SessionLifecycle and adds two timers on top of it: `renew_job`
    periodically re-authenticates in the background, `expire_job` fires when
    the token expires and invalidates the session unless silent auth
    succeeds first.
    """

    def __init__(
        self,
        session: SessionBoundary,
        settings: Settings,
        lifecycle: SessionLifecycle | None = None,
        scheduler: JobScheduler | None = None,
        clock: Clock = now,
    ) -> None:
        self._session = session
        self._settings = settings
        self._lifecycle = lifecycle or BaseSessionLifecycle()
        self._scheduler = scheduler or JobScheduler(names=(RENEW_JOB, EXPIRE_JOB))
        self._clock = clock
        self._attached = False
        self._closed = False

    @property
    def session(self) -> SessionBoundary:
        return self._session

    @property
    def scheduler(self) -> JobScheduler:
        return self._scheduler

    @property
    def expires_at(self) -> float:
        if not self._session.is_authenticated:
            return 0
        return get_session_expiration(self._session.data)

    @property
    def remaining_seconds(self) -> float:
        return remaining_seconds(self.expires_at, self._clock())

    # Host lifecycle

    def start(self) -> None:
        """Listen for session events and pick up a session restored before startup."""
        if self._closed:
            return
        if not self._attached:
            self._session.subscribe(self)
            self._attached = True
        self.setup_future_events()

    def close(self) -> None:
        if self._attached:
            self._session.unsubscribe(self)
            self._attached = False
        self._closed = True
        self._scheduler.close()
        logger.debug("lifecycle_controller_closed")

    # SessionLifecycle

    def on_authenticated(self) -> None:
        self.setup_future_events()
        self._lifecycle.on_authenticated()

    def on_invalidated(self) -> None:
        self.clear_jobs()
        self._lifecycle.on_invalidated()

    async def before_expire(self) -> None:
        await self._lifecycle.before_expire()

    # Scheduling

    def setup_future_events(self) -> None:
        if self._closed:
            return
        # Timers would keep test runs and non-browser hosts from finishing
        if not self._settings.scheduling_enabled:
            logger.debug("scheduling_suppressed")
            return
        if not self._session.is_authenticated:
            return

        self._schedule_renew()
        self._schedule_expire()

    def clear_jobs(self) -> None:
        self._scheduler.clear()

    def _schedule_renew(self) -> None:
        renew_in_ms = self._settings.RENEWAL_INTERVAL_SECONDS * 1000
        if renew_in_ms > 0:
            self._scheduler.schedule(RENEW_JOB, self.process_session_renewed, renew_in_ms)

    def _schedule_expire(self) -> None:
        if self._closed or not self._session.is_authenticated:
            return
        expire_in_ms = self.remaining_seconds * 1000
        self._scheduler.schedule(EXPIRE_JOB, self.process_session_expired, expire_in_ms)
        logger.info("session_expiration_scheduled", expires_in_ms=expire_in_ms)

    # Job callbacks

    async def process_session_renewed(self) -> RenewalOutcome:
        retrying = silent_auth_retrying(
            attempts=self._settings.RENEWAL_RETRY_ATTEMPTS,
            backoff_seconds=self._settings.RENEWAL_RETRY_BACKOFF_SECONDS,
        )
        silent = await retrying(self.try_silent_auth, AuthFlow.RENEWAL)

        if silent is SilentAuthOutcome.SUCCEEDED:
            outcome = RenewalOutcome.RENEWED
            logger.info("session_renewed")
        else:
            # Soft reset: re-derive both jobs from whatever the session is now
            outcome = RenewalOutcome.RESET
            logger.info("session_renewal_reset", silent_auth=silent.value)

        self.setup_future_events()
        return outcome

    async def process_session_expired(self) -> ExpirationOutcome:
        try:
            await self.before_expire()
        except Exception:
            logger.exception("before_expire_failed")

        silent = await self.try_silent_auth(AuthFlow.SILENT)
        if silent is SilentAuthOutcome.SUCCEEDED:
            if self.remaining_seconds > 0:
                logger.info("session_expiration_reprieved")
                self._schedule_expire()
                return ExpirationOutcome.REPRIEVED
            # Fresh credentials that are already expired would retry silent auth with no delay
            logger.warning("session_reprieve_already_expired", expires_at=self.expires_at)

        logger.info("session_expired", silent_auth=silent.value)
        self._invalidate_if_authenticated()
        return ExpirationOutcome.EXPIRED

    async def try_silent_auth(self, flow: AuthFlow) -> SilentAuthOutcome:
        """Attempt background re-authentication.

        SUCCEEDED means the provider issued fresh credentials, FAILED means it
        refused, SKIPPED means silent auth is turned off.
        """
        if not self._settings.SILENT_AUTH_ON_EXPIRE_ENABLED:
            return SilentAuthOutcome.SKIPPED

        if await self._session.authenticate(flow):
            return SilentAuthOutcome.SUCCEEDED
        return SilentAuthOutcome.FAILED

    def _invalidate_if_authenticated(self) -> None:
        # Session may have changed while we were awaiting
        if self._session.is_authenticated:
            self._session.invalidate()
