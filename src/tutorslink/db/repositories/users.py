"""
tutorslink.db.repositories.users

Repository for `UserAccount` entities.

Responsibilities:
- Create and fetch accounts.
- Merge custom claims without dropping unrelated keys.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import UserAccount


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, uid: str, *, for_update: bool = False) -> UserAccount | None:
        return await self._session.get(UserAccount, uid, with_for_update=for_update)

    async def create(
        self,
        *,
        uid: str,
        email: str | None,
        display_name: str | None,
        custom_claims: dict[str, Any] | None = None,
    ) -> UserAccount:
        user = UserAccount(
            uid=uid,
            email=email,
            display_name=display_name,
            custom_claims=dict(custom_claims or {}),
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def merge_custom_claims(self, uid: str, claims: dict[str, Any]) -> dict[str, Any] | None:
        # Row lock so concurrent grants on the same user don't clobber each other.
        user = await self._session.get(UserAccount, uid, with_for_update=True)
        if user is None:
            return None
        # Reassign (not mutate) so the JSON column is marked dirty.
        user.custom_claims = {**(user.custom_claims or {}), **claims}
        await self._session.flush()
        return user.custom_claims
