"""
tutorslink.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (token secret, webhook URL, sync secret).
- Offer a cached settings instance for process entrypoints.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    One settings object is built at process start and handed to the app factory.
    Defaults are safe for local dev: no admin bootstrap, no outbound notifications,
    and the sync webhook rejects everything until a secret is configured.
    """

    model_config = SettingsConfigDict(env_prefix="TL_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "tutorslink"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity tokens
    jwt_alg: str = "HS256"
    jwt_issuer: str = "tutorslink-identity"
    jwt_audience: str = "tutorslink"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Accounts created with this email are seeded with the staff claim.
    bootstrap_admin_email: str | None = None

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./tutorslink.db"

    # Outbound notifications (Discord webhook). Empty or REPLACE... means stub mode.
    discord_webhook_url: str = Field(default="", repr=False)
    discord_timeout_seconds: float = 5.0

    # Shared secret expected in the X-Sync-Secret header of the ads sync webhook.
    sync_secret: str = Field(default="", repr=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars at every entrypoint.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Request handlers read the settings stored on `app.state` (see `api.deps`), so
# tests can build an app with explicit settings without touching the environment.
