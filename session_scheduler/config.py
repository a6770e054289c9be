from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Lifecycle
    RENEWAL_INTERVAL_SECONDS: int = Field(default=0, ge=0)  # 0 disables scheduled renewal
    SILENT_AUTH_ON_EXPIRE_ENABLED: bool = False
    SUPPRESS_SCHEDULING: bool = False  # set in test runs so timers never hang
    RUNS_IN_BROWSER: bool = True
    RENEWAL_RETRY_ATTEMPTS: int = Field(default=1, ge=1)
    RENEWAL_RETRY_BACKOFF_SECONDS: float = Field(default=0.5, ge=0)

    # Token endpoint
    TOKEN_URL: str = ""
    CLIENT_ID: str = ""

    # HTTP
    REQUEST_TIMEOUT: int = 30
    MAX_RETRIES: int = 3
    BACKOFF_FACTOR: float = 0.5
    VERIFY_SSL: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    @property
    def scheduling_enabled(self) -> bool:
        return self.RUNS_IN_BROWSER and not self.SUPPRESS_SCHEDULING
