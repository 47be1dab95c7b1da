"""
tutorslink.db.repositories.ads

Repository for `Ad` entities.

Responsibilities:
- Create website ads and list ads for display.
- Partial updates and soft delete (archive).
- Conditional upsert of Discord-sourced ads keyed by the external message id.
"""

from __future__ import annotations

import uuid

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import Ad, AdSource, AdStatus


class AdRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, title: str, body: str, created_by: str | None) -> Ad:
        ad = Ad(
            title=title,
            body=body,
            source=AdSource.website,
            status=AdStatus.active,
            created_by=created_by,
        )
        self._session.add(ad)
        await self._session.flush()
        return ad

    async def get(self, ad_id: uuid.UUID, *, for_update: bool = False) -> Ad | None:
        return await self._session.get(Ad, ad_id, with_for_update=for_update)

    async def get_by_discord_message_id(self, message_id: str, *, for_update: bool = False) -> Ad | None:
        stmt = select(Ad).where(Ad.discord_message_id == message_id)
        if for_update:
            stmt = stmt.with_for_update()
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_ads(self, *, include_archived: bool = False, limit: int = 200) -> list[Ad]:
        stmt = select(Ad)
        if not include_archived:
            stmt = stmt.where(Ad.status == AdStatus.active)
        stmt = stmt.order_by(desc(Ad.created_at)).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def patch(
        self,
        ad: Ad,
        *,
        title: str | None = None,
        body: str | None = None,
        status: AdStatus | None = None,
        discord_channel_id: str | None = None,
        discord_author: str | None = None,
    ) -> Ad:
        # Only supplied fields change; updated_at is stamped by the column's onupdate.
        if title is not None:
            ad.title = title
        if body is not None:
            ad.body = body
        if status is not None:
            ad.status = status
        if discord_channel_id is not None:
            ad.discord_channel_id = discord_channel_id
        if discord_author is not None:
            ad.discord_author = discord_author
        await self._session.flush()
        return ad

    async def upsert_discord(
        self,
        *,
        message_id: str,
        title: str,
        body: str,
        channel_id: str | None,
        author: str | None,
        created_by: str | None,
    ) -> tuple[Ad, bool]:
        """
        Insert or refresh the single ad for `message_id`; returns (ad, created).
        An existing ad is always reactivated, whatever its current status.
        """

        existing = await self.get_by_discord_message_id(message_id, for_update=True)
        if existing is None:
            ad = Ad(
                title=title,
                body=body,
                source=AdSource.discord,
                status=AdStatus.active,
                created_by=created_by,
                discord_message_id=message_id,
                discord_channel_id=channel_id,
                discord_author=author,
            )
            try:
                async with self._session.begin_nested():
                    self._session.add(ad)
            except IntegrityError:
                # Lost the race on the unique message id; fall through to the update path.
                existing = await self.get_by_discord_message_id(message_id, for_update=True)
                if existing is None:
                    raise
            else:
                return ad, True

        await self.patch(
            existing,
            title=title,
            body=body,
            status=AdStatus.active,
            discord_channel_id=channel_id,
            discord_author=author,
        )
        return existing, False


# --- Module Notes -----------------------------------------------------------
# The unique constraint on `discord_message_id` is what guarantees at most one ad
# per Discord message; the row lock only narrows the window for the common case.
