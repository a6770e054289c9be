from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping

import httpx

from session_scheduler.clients.http_client import close_http_client, create_http_client
from session_scheduler.clients.session_manager import SessionManager
from session_scheduler.config import Settings
from session_scheduler.core.logging import setup_logging
from session_scheduler.schemas.enums import AuthFlow
from session_scheduler.services.authenticators import TokenRefreshAuthenticator
from session_scheduler.services.controller import SessionLifecycleController
from session_scheduler.services.lifecycle import SessionLifecycle
from session_scheduler.services.session_boundary import SessionBoundary


def create_session_manager(client: httpx.AsyncClient, settings: Settings) -> SessionManager:
    authenticator = TokenRefreshAuthenticator(client=client, settings=settings)
    return SessionManager(
        authenticators={
            AuthFlow.RENEWAL: authenticator,
            AuthFlow.SILENT: authenticator,
        }
    )


def create_controller(
    session_manager: SessionManager,
    settings: Settings,
    lifecycle: SessionLifecycle | None = None,
) -> SessionLifecycleController:
    return SessionLifecycleController(
        session=SessionBoundary(session_manager),
        settings=settings,
        lifecycle=lifecycle,
    )


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    lifecycle: SessionLifecycle | None = None,
    restored_session: Mapping[str, Any] | None = None,
) -> AsyncIterator[SessionLifecycleController]:
    """Run a session controller for the duration of the block.

    `restored_session` is session data the host persisted earlier; its
    timers are scheduled as soon as the controller starts.
    """
    settings = settings or Settings()
    setup_logging(log_level=settings.LOG_LEVEL, debug=settings.DEBUG)
    http_client = create_http_client(settings)
    session_manager = create_session_manager(http_client, settings)
    if restored_session:
        session_manager.restore(restored_session)

    controller = create_controller(session_manager, settings, lifecycle)
    controller.start()
    try:
        yield controller
    finally:
        controller.close()
        await close_http_client(http_client)
