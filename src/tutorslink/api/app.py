"""
tutorslink.api.app

FastAPI app factory for the TutorsLink core service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Render the error taxonomy as `{"error": {"status", "message"}}` responses.
- Initialize and dispose shared infrastructure (DB engine, notifier HTTP client).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tutorslink.api.routers.ads import router as ads_router
from tutorslink.api.routers.applications import router as applications_router
from tutorslink.api.routers.callables import router as callables_router
from tutorslink.api.routers.health import router as health_router
from tutorslink.api.routers.identity import router as identity_router
from tutorslink.api.routers.webhooks import router as webhooks_router
from tutorslink.db.init_db import init_db
from tutorslink.db.session import create_engine, create_sessionmaker
from tutorslink.errors import FunctionError, MethodNotAllowed
from tutorslink.notifier.discord import DiscordNotifier
from tutorslink.observability.logging import configure_logging, get_logger
from tutorslink.observability.middleware import RequestContextMiddleware
from tutorslink.settings import Settings

log = get_logger(__name__)


async def _function_error_handler(request: Request, exc: FunctionError) -> JSONResponse:
    log.info("request_rejected", status=exc.status, message=exc.message)
    headers = {"Allow": "POST"} if isinstance(exc, MethodNotAllowed) else None
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload(), headers=headers)


def create_app(*, settings: Settings, notifier: DiscordNotifier | None = None) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically.
            await init_db(engine)
        app.state.notifier = notifier or DiscordNotifier(
            webhook_url=settings.discord_webhook_url,
            timeout=settings.discord_timeout_seconds,
        )
        try:
            yield
        finally:
            await app.state.notifier.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="TutorsLink Core",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(FunctionError, _function_error_handler)
    app.include_router(health_router, tags=["health"])
    app.include_router(identity_router)
    app.include_router(callables_router)
    app.include_router(webhooks_router)
    app.include_router(ads_router)
    app.include_router(applications_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business rules live in `tutorslink.services`.
