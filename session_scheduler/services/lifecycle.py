from __future__ import annotations

from typing import Protocol

from session_scheduler.core.logging import get_logger

logger = get_logger(__name__)


class SessionLifecycle(Protocol):
    def on_authenticated(self) -> None: ...

    def on_invalidated(self) -> None: ...

    async def before_expire(self) -> None: ...


class BaseSessionLifecycle:
    """Default lifecycle hooks. Subclass and override to react to session changes."""

    def on_authenticated(self) -> None:
        logger.debug("lifecycle_authenticated")

    def on_invalidated(self) -> None:
        logger.debug("lifecycle_invalidated")

    async def before_expire(self) -> None:
        """Called after the token has expired but before the session is invalidated.

        A good place to revoke third-party tokens or clean up. Expiration does
        not continue until this returns, so an override that never returns
        keeps the session alive indefinitely.
        """
        return None
