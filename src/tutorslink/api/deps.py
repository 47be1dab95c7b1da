"""
tutorslink.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions, and the notifier.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tutorslink.notifier.discord import DiscordNotifier
from tutorslink.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached in `tutorslink.api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit is explicit in the service layer; anything
    # uncommitted is rolled back when the session closes.
    async with session_factory() as session:
        yield session


def notifier_dep(request: Request) -> DiscordNotifier:
    return request.app.state.notifier  # type: ignore[attr-defined]
