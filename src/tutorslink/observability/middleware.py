"""
tutorslink.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs (`x-request-id`).
- Bind request metadata into structlog contextvars, including the callable or
  webhook name for `/v1/callable/*` and `/v1/webhooks/*` routes.
- Emit one `request_completed` line per request with status and latency.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tutorslink.observability.logging import get_logger

log = get_logger(__name__)

_FUNCTION_PREFIXES = ("/v1/callable/", "/v1/webhooks/")


def function_name(path: str) -> str | None:
    for prefix in _FUNCTION_PREFIXES:
        if path.startswith(prefix):
            return path[len(prefix) :].strip("/") or None
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        name = function_name(request.url.path)
        if name is not None:
            structlog.contextvars.bind_contextvars(function=name)

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            # Context must not leak into the next request on this task.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response
