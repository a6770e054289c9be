from __future__ import annotations

from typing import Any, Mapping

import httpx
import jwt
from pydantic import ValidationError

from session_scheduler.config import Settings
from session_scheduler.core.exceptions import AuthError
from session_scheduler.core.logging import get_logger
from session_scheduler.schemas.session import TokenResponse
from session_scheduler.utils.clock import Clock, now
from session_scheduler.utils.retry import with_retry

logger = get_logger(__name__)


class TokenRefreshAuthenticator:
    """Silent re-authentication through a background refresh_token grant."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        clock: Clock = now,
    ) -> None:
        self._client = client
        self._settings = settings
        self._clock = clock

    async def authenticate(self, session_data: Mapping[str, Any] | None) -> dict[str, Any]:
        refresh_token = (session_data or {}).get("refreshToken")
        if not refresh_token:
            raise AuthError(message="Silent auth unavailable", detail="session has no refresh token")
        if not self._settings.TOKEN_URL:
            raise AuthError(message="Silent auth unavailable", detail="TOKEN_URL is not configured")

        post = with_retry(self._settings.MAX_RETRIES, self._settings.BACKOFF_FACTOR)(self._post)
        try:
            resp = await post(
                {
                    "grant_type": "refresh_token",
                    "client_id": self._settings.CLIENT_ID,
                    "refresh_token": refresh_token,
                }
            )
        except httpx.HTTPError as exc:
            raise AuthError(message="Token endpoint unreachable", detail=str(exc)) from exc

        if resp.is_error:
            raise AuthError(
                message="Token refresh rejected",
                detail=f"status={resp.status_code} body={resp.text.strip()[:100]}",
            )

        try:
            token = TokenResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise AuthError(message="Unexpected token endpoint response", detail=str(exc)) from exc

        logger.info("token_refreshed", expires_in=token.expires_in)
        return self._to_session_data(token, refresh_token)

    async def _post(self, form: dict[str, str]) -> httpx.Response:
        return await self._client.post(self._settings.TOKEN_URL, data=form)

    def _to_session_data(self, token: TokenResponse, previous_refresh_token: str) -> dict[str, Any]:
        data: dict[str, Any] = {
            "accessToken": token.access_token,
            "tokenType": token.token_type,
            # Rotation is optional; keep the old refresh token when none is issued
            "refreshToken": token.refresh_token or previous_refresh_token,
        }
        if token.id_token:
            data["idToken"] = token.id_token
            try:
                data["idTokenPayload"] = jwt.decode(
                    token.id_token, options={"verify_signature": False}
                )
            except jwt.InvalidTokenError:
                logger.warning("id_token_undecodable")
        if token.expires_in is not None:
            data["expiresIn"] = token.expires_in
            data["expiresAt"] = self._clock() + token.expires_in
        return data
