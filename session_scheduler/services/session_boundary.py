from __future__ import annotations

from typing import Any

from session_scheduler.clients.session_manager import SessionListener, SessionManager
from session_scheduler.core.exceptions import AuthError
from session_scheduler.core.logging import get_logger
from session_scheduler.schemas.enums import AuthFlow

logger = get_logger(__name__)


class SessionBoundary:
    """Facade the lifecycle controller uses to read and drive the session.

    Reads are never cached: callers re-check after every await.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session = session_manager

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def data(self) -> dict[str, Any] | None:
        return self._session.data if self._session.is_authenticated else None

    async def authenticate(self, flow: AuthFlow) -> bool:
        try:
            await self._session.authenticate(flow)
        except AuthError as exc:
            logger.info("authenticate_failed", flow=flow.value, error=exc.message, detail=exc.detail)
            return False
        return True

    def invalidate(self) -> None:
        self._session.invalidate()

    def subscribe(self, listener: SessionListener) -> None:
        self._session.add_listener(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        self._session.remove_listener(listener)
