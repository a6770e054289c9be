from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from session_scheduler.clients.session_manager import SessionManager
from session_scheduler.core.exceptions import AuthError
from session_scheduler.schemas.enums import AuthFlow, ErrorCode
from session_scheduler.services.session_boundary import SessionBoundary


@pytest.fixture
def listener():
    return MagicMock()


class TestSessionManager:
    def test_starts_unauthenticated(self):
        session = SessionManager()
        assert session.is_authenticated is False
        assert session.data is None

    @pytest.mark.asyncio
    async def test_authenticate_stores_data_and_notifies(self, session_manager, provider, listener):
        session_manager.restore({"refreshToken": "old"})
        session_manager.add_listener(listener)

        data = await session_manager.authenticate(AuthFlow.SILENT)

        provider.authenticate.assert_awaited_once_with({"refreshToken": "old"})
        assert session_manager.is_authenticated
        assert session_manager.data == data
        listener.on_authenticated.assert_called_once_with()
        listener.on_invalidated.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_authenticator(self):
        session = SessionManager()
        with pytest.raises(AuthError) as exc_info:
            await session.authenticate(AuthFlow.RENEWAL)
        assert exc_info.value.error_code == ErrorCode.AUTH_FAILED
        assert exc_info.value.detail == "flow=renewal"

    @pytest.mark.asyncio
    async def test_unexpected_authenticator_error_becomes_auth_error(self, listener):
        failing = AsyncMock()
        failing.authenticate.side_effect = ValueError("bad payload")
        session = SessionManager(authenticators={AuthFlow.SILENT: failing})
        session.add_listener(listener)

        with pytest.raises(AuthError) as exc_info:
            await session.authenticate(AuthFlow.SILENT)

        assert exc_info.value.detail == "bad payload"
        assert not session.is_authenticated
        listener.on_authenticated.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_authentication_keeps_previous_session(self, session_manager, provider):
        session_manager.restore({"accessToken": "still-valid"})
        provider.authenticate.side_effect = AuthError(message="login_required")

        with pytest.raises(AuthError):
            await session_manager.authenticate(AuthFlow.SILENT)

        assert session_manager.data == {"accessToken": "still-valid"}

    @pytest.mark.asyncio
    async def test_logout_during_authentication_wins(self, listener):
        release = asyncio.Event()

        async def slow_refresh(session_data):
            await release.wait()
            return {"accessToken": "fresh"}

        gated = AsyncMock()
        gated.authenticate.side_effect = slow_refresh
        session = SessionManager(authenticators={AuthFlow.RENEWAL: gated})
        session.restore({"accessToken": "old"})
        session.add_listener(listener)

        pending = asyncio.create_task(session.authenticate(AuthFlow.RENEWAL))
        await asyncio.sleep(0.01)
        session.invalidate()
        release.set()

        with pytest.raises(AuthError, match="invalidated during authentication"):
            await pending
        assert not session.is_authenticated
        listener.on_invalidated.assert_called_once_with()
        listener.on_authenticated.assert_not_called()

    def test_restore_does_not_notify(self, listener):
        session = SessionManager()
        session.add_listener(listener)

        session.restore({"accessToken": "abc"})

        assert session.is_authenticated
        listener.on_authenticated.assert_not_called()

    def test_invalidate_notifies_once(self, listener):
        session = SessionManager()
        session.add_listener(listener)
        session.add_listener(listener)
        session.restore({"accessToken": "abc"})

        session.invalidate()
        session.invalidate()

        assert not session.is_authenticated
        listener.on_invalidated.assert_called_once_with()

    def test_removed_listener_is_not_notified(self, listener):
        session = SessionManager()
        session.add_listener(listener)
        session.remove_listener(listener)
        session.remove_listener(listener)
        session.restore({"accessToken": "abc"})

        session.invalidate()

        listener.on_invalidated.assert_not_called()

    def test_failing_listener_does_not_block_others(self, listener):
        broken = MagicMock()
        broken.on_invalidated.side_effect = RuntimeError("boom")
        session = SessionManager()
        session.add_listener(broken)
        session.add_listener(listener)
        session.restore({"accessToken": "abc"})

        session.invalidate()

        listener.on_invalidated.assert_called_once_with()


class TestSessionBoundary:
    @pytest.mark.asyncio
    async def test_authenticate_reports_success(self, session_manager):
        boundary = SessionBoundary(session_manager)

        assert await boundary.authenticate(AuthFlow.SILENT) is True
        assert boundary.is_authenticated
        assert boundary.data == session_manager.data

    @pytest.mark.asyncio
    async def test_authenticate_reports_failure(self, session_manager, provider):
        provider.authenticate.side_effect = AuthError(message="login_required")
        boundary = SessionBoundary(session_manager)

        assert await boundary.authenticate(AuthFlow.SILENT) is False
        assert boundary.data is None

    def test_invalidate_and_subscribe(self, session_manager, listener):
        boundary = SessionBoundary(session_manager)
        boundary.subscribe(listener)
        session_manager.restore({"accessToken": "abc"})

        boundary.invalidate()
        boundary.unsubscribe(listener)

        assert not boundary.is_authenticated
        listener.on_invalidated.assert_called_once_with()
