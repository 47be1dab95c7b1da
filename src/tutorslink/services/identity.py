"""
tutorslink.services.identity

Account sign-in for the token endpoint.

Responsibilities:
- Get-or-create the user account for a uid.
- Seed the staff claim for the configured bootstrap admin on first creation.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.auth.claims import email_matches
from tutorslink.auth.models import Claims
from tutorslink.db.models import UserAccount
from tutorslink.db.repositories.users import UserRepo
from tutorslink.observability.logging import get_logger
from tutorslink.settings import Settings

log = get_logger(__name__)


class IdentityService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._users = UserRepo(session)

    async def sign_in(
        self, *, uid: str, email: str | None, display_name: str | None
    ) -> UserAccount:
        user = await self._users.get(uid)
        if user is None:
            claims: dict[str, bool] = {}
            # Explicit bootstrap: only when TL_BOOTSTRAP_ADMIN_EMAIL is configured.
            if email_matches(email, self._settings.bootstrap_admin_email):
                claims["staff"] = True
                log.info("bootstrap_admin_seeded", uid=uid)
            user = await self._users.create(
                uid=uid, email=email, display_name=display_name, custom_claims=claims
            )
            log.info("user_created", uid=uid)
        else:
            if email and user.email != email:
                user.email = email
            if display_name and user.display_name != display_name:
                user.display_name = display_name
        await self._session.commit()
        return user

    @staticmethod
    def claims_for(user: UserAccount) -> Claims:
        return Claims.from_mapping(user.custom_claims)
