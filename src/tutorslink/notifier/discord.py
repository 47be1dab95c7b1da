"""
tutorslink.notifier.discord

Best-effort Discord webhook notifier.

Responsibilities:
- Model the embed payload (title, description, color, fields, timestamp).
- POST embeds to the configured webhook, or log them in stub mode.
- Absorb every delivery failure (non-2xx, network, timeout) with a log line.
"""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
from pydantic import BaseModel, Field

from tutorslink.observability.logging import get_logger

log = get_logger(__name__)


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = True


class Embed(BaseModel):
    title: str
    description: str
    color: int
    fields: list[EmbedField] = Field(default_factory=list)
    timestamp: str = Field(default_factory=lambda: datetime.now(tz=UTC).isoformat())


def is_configured(webhook_url: str | None) -> bool:
    # Placeholder values from config templates start with REPLACE.
    return bool(webhook_url) and not webhook_url.startswith("REPLACE")


class DiscordNotifier:
    def __init__(
        self,
        *,
        webhook_url: str | None,
        http: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._webhook_url = webhook_url or ""
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return is_configured(self._webhook_url)

    async def notify(self, embed: Embed) -> bool:
        """
        Returns True only when the webhook accepted the embed. Never raises.
        """

        if not self.configured:
            log.info("discord_notify_stub", title=embed.title, embed=embed.model_dump())
            return False

        try:
            r = await self._http.post(self._webhook_url, json={"embeds": [embed.model_dump()]})
        except httpx.HTTPError as e:
            log.warning("discord_notify_failed", title=embed.title, error=str(e))
            return False

        if not r.is_success:
            log.warning("discord_notify_rejected", title=embed.title, status_code=r.status_code)
            return False

        log.info("discord_notify_sent", title=embed.title, status_code=r.status_code)
        return True

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
