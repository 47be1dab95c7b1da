from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import DiscordEvent


class DiscordEventRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, event_type: str | None, payload: dict[str, Any]) -> DiscordEvent:
        ev = DiscordEvent(event_type=event_type, payload=payload)
        self._session.add(ev)
        await self._session.flush()
        return ev
