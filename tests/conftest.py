from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from session_scheduler.clients.session_manager import SessionManager
from session_scheduler.config import Settings
from session_scheduler.schemas.enums import AuthFlow

NOW = 1_000_000.0


def _session_data(expires_in: float = 60, issued_at: float = NOW) -> dict:
    return {
        "accessToken": "access",
        "refreshToken": "refresh",
        "idTokenPayload": {"sub": "user1", "exp": issued_at + expires_in},
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        RENEWAL_INTERVAL_SECONDS=300,
        SILENT_AUTH_ON_EXPIRE_ENABLED=True,
        SUPPRESS_SCHEDULING=False,
        RUNS_IN_BROWSER=True,
        RENEWAL_RETRY_ATTEMPTS=1,
        RENEWAL_RETRY_BACKOFF_SECONDS=0,
        TOKEN_URL="https://auth.example.com/oauth/token",
        CLIENT_ID="client-123",
    )


@pytest.fixture
def provider() -> AsyncMock:
    """Authenticator that always succeeds with a token valid for two more minutes."""
    mock = AsyncMock()
    mock.authenticate.return_value = _session_data(expires_in=120)
    return mock


@pytest.fixture
def session_manager(provider) -> SessionManager:
    return SessionManager(
        authenticators={
            AuthFlow.RENEWAL: provider,
            AuthFlow.SILENT: provider,
        }
    )


@pytest.fixture
def make_session_data():
    return _session_data
