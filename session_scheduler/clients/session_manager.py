from __future__ import annotations

from typing import Any, Mapping, Protocol

from session_scheduler.core.exceptions import AuthError
from session_scheduler.core.logging import get_logger
from session_scheduler.schemas.enums import AuthFlow

logger = get_logger(__name__)


class Authenticator(Protocol):
    async def authenticate(self, session_data: Mapping[str, Any] | None) -> dict[str, Any]:
        """Exchange the current session data for fresh authenticated data."""
        ...


class SessionListener(Protocol):
    def on_authenticated(self) -> None: ...

    def on_invalidated(self) -> None: ...


class SessionManager:
    """In-memory session: holds authenticated data and notifies listeners on changes."""

    def __init__(self, authenticators: Mapping[AuthFlow, Authenticator] | None = None) -> None:
        self._authenticators: dict[AuthFlow, Authenticator] = dict(authenticators or {})
        self._data: dict[str, Any] | None = None
        self._listeners: list[SessionListener] = []
        # Bumped on every invalidation so in-flight authentications can tell they are stale
        self._generation = 0

    @property
    def is_authenticated(self) -> bool:
        return self._data is not None

    @property
    def data(self) -> dict[str, Any] | None:
        return self._data

    def register_authenticator(self, flow: AuthFlow, authenticator: Authenticator) -> None:
        self._authenticators[flow] = authenticator

    def add_listener(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def restore(self, data: Mapping[str, Any]) -> None:
        """Load a previously persisted session without emitting events."""
        self._data = dict(data)
        logger.info("session_restored")

    async def authenticate(self, flow: AuthFlow) -> dict[str, Any]:
        authenticator = self._authenticators.get(flow)
        if authenticator is None:
            raise AuthError(
                message="No authenticator registered",
                detail=f"flow={flow.value}",
            )

        generation = self._generation
        try:
            data = await authenticator.authenticate(self._data)
        except AuthError:
            raise
        except Exception as exc:
            raise AuthError(message="Authentication failed", detail=str(exc)) from exc

        if generation != self._generation:
            logger.info("session_authentication_discarded", flow=flow.value)
            raise AuthError(
                message="Session was invalidated during authentication",
                detail=f"flow={flow.value}",
            )

        self._data = dict(data)
        logger.info("session_authenticated", flow=flow.value)
        self._notify("on_authenticated")
        return self._data

    def invalidate(self) -> None:
        if self._data is None:
            return
        self._data = None
        self._generation += 1
        logger.info("session_invalidated")
        self._notify("on_invalidated")

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)()
            except Exception:
                logger.exception("session_listener_failed", session_event=event)
