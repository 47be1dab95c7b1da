"""
tutorslink.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert an optional bearer token into a typed `Principal` (or None).
- Enforce the staff gate for REST routes.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tutorslink.api.deps import settings_dep
from tutorslink.auth.gate import require_staff
from tutorslink.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from tutorslink.auth.models import Principal, principal_from_token
from tutorslink.errors import Unauthorized
from tutorslink.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_optional_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal | None:
    # Callables accept anonymous callers; a token that is present must be valid.
    if creds is None or not creds.credentials:
        return None

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise Unauthorized(f"Invalid token: {e}") from e

    principal = principal_from_token(payload)
    if not principal.uid:
        raise Unauthorized("Invalid token subject")
    return principal


def get_staff_principal(caller: Principal | None = Depends(get_optional_principal)) -> Principal:
    return require_staff(caller)


# --- Module Notes -----------------------------------------------------------
# Callables that need the gate (approveTutorApplication) call `require_staff` in
# the service layer so the rule holds regardless of transport.
