from __future__ import annotations

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Successful OAuth2 token endpoint response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = Field(default=None, ge=0)
    id_token: str | None = None
    refresh_token: str | None = None
    scope: str | None = None
