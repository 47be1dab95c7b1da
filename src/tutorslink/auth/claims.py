"""
tutorslink.auth.claims

Identity claims resolver.

Responsibilities:
- Map a principal's claims (plus the configured bootstrap admin email) to one `Role`.
- Define the identity-provider boundary consumed by the session manager.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

from tutorslink.auth.models import Claims, Principal, Role

AuthStateListener = Callable[[Principal | None], Awaitable[None] | None]


class ClaimsFetchError(Exception):
    """
    Raised by identity providers when current claims cannot be obtained.
    """


class IdentityProvider(Protocol):
    @property
    def current_principal(self) -> Principal | None: ...

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]: ...

    async def get_claims(self, principal: Principal, *, force_refresh: bool = True) -> Claims: ...


def email_matches(email: str | None, admin_email: str | None) -> bool:
    if not email or not admin_email:
        return False
    return email.strip().lower() == admin_email.strip().lower()


def resolve_role(claims: Claims, *, email: str | None, admin_email: str | None = None) -> Role:
    # Precedence: staff (claim or bootstrap email) > tutor > student.
    if claims.staff or email_matches(email, admin_email):
        return Role.staff
    if claims.tutor:
        return Role.tutor
    return Role.student


def fallback_role(*, email: str | None, admin_email: str | None = None) -> Role:
    # Without claim evidence only the bootstrap email may elevate.
    return Role.staff if email_matches(email, admin_email) else Role.student


def role_for(
    principal: Principal | None,
    claims: Claims | None,
    *,
    admin_email: str | None = None,
) -> Role:
    """
    Full resolution including the signed-out case.
    `claims=None` means the claim fetch failed.
    """

    if principal is None:
        return Role.guest
    if claims is None:
        return fallback_role(email=principal.email, admin_email=admin_email)
    return resolve_role(claims, email=principal.email, admin_email=admin_email)
