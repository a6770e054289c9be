from __future__ import annotations

from typing import Any, Mapping

import jwt

from session_scheduler.core.exceptions import ExpirationError
from session_scheduler.core.logging import get_logger

logger = get_logger(__name__)

# Raw tokens whose `exp` claim can stand in for the session expiration
TOKEN_KEYS = ("idToken", "accessToken")


def get_session_expiration(session_data: Mapping[str, Any] | None) -> float:
    """Absolute expiration (epoch seconds) of an authenticated session.

    Returns 0 when no expiration can be derived, which callers treat as
    already expired.
    """
    try:
        return _read_expiration(session_data or {})
    except ExpirationError as exc:
        logger.warning("session_expiration_missing", reason=exc.message, detail=exc.detail)
        return 0


def remaining_seconds(expires_at: float, current_time: float) -> float:
    remaining = (expires_at or 0) - current_time
    return remaining if remaining > 0 else 0


def _read_expiration(session_data: Mapping[str, Any]) -> float:
    payload = session_data.get("idTokenPayload") or {}
    issued_at = _as_number(payload.get("iat"))
    expires_in = _as_number(session_data.get("expiresIn"))
    if issued_at is not None and expires_in is not None:
        return issued_at + expires_in

    exp = _as_number(payload.get("exp"))
    if exp is not None:
        return exp

    for key in TOKEN_KEYS:
        token = session_data.get(key)
        if not token:
            continue
        try:
            claims = _decode_claims(token)
        except ExpirationError:
            # Opaque tokens are common; fall through to the next source
            continue
        exp = _as_number(claims.get("exp"))
        if exp is not None:
            return exp

    expires_at = _as_number(session_data.get("expiresAt"))
    if expires_at is not None:
        return expires_at

    raise ExpirationError(
        message="No expiration found in session data",
        detail=f"keys={sorted(session_data)}",
    )


def _decode_claims(token: str) -> dict[str, Any]:
    # Signature was checked by whoever issued the session; only the claims matter here
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        raise ExpirationError(message="Session token is not a decodable JWT", detail=str(exc)) from exc


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
