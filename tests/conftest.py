"""
tests.conftest

Shared fixtures: an app wired to a per-test SQLite file, an in-process HTTP client,
and a Discord notifier whose outbound requests are captured instead of sent.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tutorslink.api.app import create_app
from tutorslink.notifier.discord import DiscordNotifier
from tutorslink.settings import Settings

SYNC_SECRET = "test-sync-secret"
ADMIN_EMAIL = "admin@tutorslink.test"
WEBHOOK_URL = "https://discord.test/api/webhooks/1/abc"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tutorslink.db'}",
        jwt_secret="test-jwt-secret",
        sync_secret=SYNC_SECRET,
        bootstrap_admin_email=ADMIN_EMAIL,
        discord_webhook_url=WEBHOOK_URL,
    )


@pytest.fixture
def discord_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def discord_status() -> dict[str, int]:
    # Tests can flip the webhook's response code.
    return {"code": 204}


@pytest_asyncio.fixture
async def app(
    settings: Settings,
    discord_requests: list[httpx.Request],
    discord_status: dict[str, int],
) -> AsyncIterator[FastAPI]:
    def handler(request: httpx.Request) -> httpx.Response:
        discord_requests.append(request)
        return httpx.Response(discord_status["code"])

    webhook_http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = DiscordNotifier(webhook_url=settings.discord_webhook_url, http=webhook_http)
    app = create_app(settings=settings, notifier=notifier)

    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app
    await webhook_http.aclose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def sessionmaker(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


@pytest.fixture
def sign_in(client: httpx.AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """
    Returns an async helper that signs a user in and yields auth headers.
    """

    async def _sign_in(uid: str, email: str | None = None) -> dict[str, str]:
        r = await client.post("/v1/dev/token", json={"uid": uid, "email": email})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _sign_in


@pytest_asyncio.fixture
async def staff_headers(sign_in) -> dict[str, str]:
    # The bootstrap admin email is seeded with the staff claim on first sign-in.
    return await sign_in("admin-1", ADMIN_EMAIL)
