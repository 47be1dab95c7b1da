"""
tutorslink.errors

Error taxonomy shared by callables, the sync webhook, and the client SDK.

Responsibilities:
- Give every request-scoped failure a stable status code and HTTP status.
- Rebuild typed errors from wire payloads on the client side.
"""

from __future__ import annotations

from typing import Any, ClassVar


class FunctionError(Exception):
    """
    Base for failures surfaced to callers as `{"error": {"status", "message"}}`.
    """

    status: ClassVar[str] = "INTERNAL"
    http_status: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": {"status": self.status, "message": self.message}}


class InvalidArgument(FunctionError):
    status = "INVALID_ARGUMENT"
    http_status = 400


class Unauthorized(FunctionError):
    # Missing/bad credentials or shared secret. Never retried.
    status = "UNAUTHENTICATED"
    http_status = 401


class PermissionDenied(FunctionError):
    status = "PERMISSION_DENIED"
    http_status = 403


class NotFound(FunctionError):
    status = "NOT_FOUND"
    http_status = 404


class MethodNotAllowed(FunctionError):
    status = "METHOD_NOT_ALLOWED"
    http_status = 405


class Unavailable(FunctionError):
    # Transient platform/network failure.
    status = "UNAVAILABLE"
    http_status = 503


_BY_STATUS: dict[str, type[FunctionError]] = {
    cls.status: cls
    for cls in (InvalidArgument, Unauthorized, PermissionDenied, NotFound, MethodNotAllowed, Unavailable)
}


def error_from_payload(http_status: int, payload: Any) -> FunctionError:
    """
    Map an error response body back to its exception type.
    Unknown shapes fall back to the base class carrying the HTTP status.
    """

    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        cls = _BY_STATUS.get(str(err.get("status", "")), FunctionError)
        return cls(str(err.get("message", "")))
    return FunctionError(f"Request failed with HTTP {http_status}")


# --- Module Notes -----------------------------------------------------------
# Notifier failures never become FunctionErrors; they are logged and absorbed
# inside `tutorslink.notifier`.
