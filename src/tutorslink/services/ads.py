"""
tutorslink.services.ads

Announcement management for website-sourced ads.

Responsibilities:
- Public listing of active ads; staff-only listing of archived ads.
- Staff create/update/archive with partial updates and soft delete.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.auth.gate import require_staff
from tutorslink.auth.models import Principal
from tutorslink.db.models import Ad, AdStatus
from tutorslink.db.repositories.ads import AdRepo
from tutorslink.errors import InvalidArgument, NotFound
from tutorslink.observability.logging import get_logger
from tutorslink.services.validation import clean_str, parse_id, require_mapping

log = get_logger(__name__)

MAX_TITLE_LENGTH = 120
MAX_BODY_LENGTH = 2000


def ad_to_dict(ad: Ad) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": str(ad.id),
        "title": ad.title,
        "body": ad.body,
        "source": ad.source.value,
        "status": ad.status.value,
        "createdBy": ad.created_by,
        "createdAt": ad.created_at.isoformat(),
        "updatedAt": ad.updated_at.isoformat(),
    }
    if ad.discord_message_id is not None:
        out["discordMessageId"] = ad.discord_message_id
        out["discordChannelId"] = ad.discord_channel_id
        out["discordAuthor"] = ad.discord_author
    return out


class AdService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._ads = AdRepo(session)

    async def list_ads(
        self, *, include_archived: bool = False, caller: Principal | None = None
    ) -> list[dict[str, Any]]:
        if include_archived:
            require_staff(caller, message="Only staff can view archived ads.")
        ads = await self._ads.list_ads(include_archived=include_archived)
        return [ad_to_dict(a) for a in ads]

    async def create_ad(self, data: Any, *, caller: Principal | None) -> dict[str, Any]:
        caller = require_staff(caller, message="Only staff can create ads.")
        data = require_mapping(data)
        title = clean_str(data.get("title"))
        if not title:
            raise InvalidArgument("Missing required field: title")

        ad = await self._ads.create(
            title=title[:MAX_TITLE_LENGTH],
            body=clean_str(data.get("body"))[:MAX_BODY_LENGTH],
            created_by=caller.uid,
        )
        await self._session.commit()
        log.info("ad_created", ad_id=str(ad.id), created_by=caller.uid)
        return ad_to_dict(ad)

    async def update_ad(self, ad_id: Any, data: Any, *, caller: Principal | None) -> dict[str, Any]:
        require_staff(caller, message="Only staff can update ads.")
        data = require_mapping(data)

        patch: dict[str, Any] = {}
        if "title" in data:
            title = clean_str(data["title"])
            if not title:
                raise InvalidArgument("title must not be empty.")
            patch["title"] = title[:MAX_TITLE_LENGTH]
        if "body" in data:
            patch["body"] = clean_str(data["body"])[:MAX_BODY_LENGTH]
        if "status" in data:
            try:
                patch["status"] = AdStatus(clean_str(data["status"]))
            except ValueError as e:
                raise InvalidArgument(f"Unknown ad status: {data['status']}") from e

        ad = await self._ads.get(parse_id(ad_id, what="Ad"), for_update=True)
        if ad is None:
            raise NotFound("Ad not found.")
        await self._ads.patch(ad, **patch)
        await self._session.commit()
        log.info("ad_updated", ad_id=str(ad.id), fields=sorted(patch))
        return ad_to_dict(ad)

    async def archive_ad(self, ad_id: Any, *, caller: Principal | None) -> dict[str, Any]:
        require_staff(caller, message="Only staff can archive ads.")
        ad = await self._ads.get(parse_id(ad_id, what="Ad"), for_update=True)
        if ad is None:
            raise NotFound("Ad not found.")
        await self._ads.patch(ad, status=AdStatus.archived)
        await self._session.commit()
        log.info("ad_archived", ad_id=str(ad.id))
        return ad_to_dict(ad)
