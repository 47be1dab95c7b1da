"""
tutorslink.services.reconciler

Discord ad reconciliation behind the `syncDiscordAdsWebhook` endpoint.

Responsibilities:
- Map MESSAGE_CREATE / MESSAGE_UPDATE / MESSAGE_DELETE events onto the `ads` collection,
  keyed by the Discord message id.
- Stay idempotent under at-least-once, replayable delivery.
- Keep unrecognised events verbatim in `discord_events` instead of rejecting them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import AdStatus
from tutorslink.db.repositories.ads import AdRepo
from tutorslink.db.repositories.discord_events import DiscordEventRepo
from tutorslink.errors import InvalidArgument, NotFound
from tutorslink.observability.logging import get_logger
from tutorslink.services.ads import MAX_BODY_LENGTH, MAX_TITLE_LENGTH
from tutorslink.services.validation import check_length, clean_str, first_text, optional_str

log = get_logger(__name__)

# Discord snowflakes fit comfortably; longer ids are rejected, not truncated.
MAX_DISCORD_ID_LENGTH = 64
MAX_AUTHOR_LENGTH = 256


class SyncEvent(enum.StrEnum):
    message_create = "MESSAGE_CREATE"
    message_update = "MESSAGE_UPDATE"
    message_delete = "MESSAGE_DELETE"


@dataclass(frozen=True, slots=True)
class SyncResult:
    # created | updated | archived | ignored | logged
    action: str
    ad_id: str | None = None

    def to_response(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": True, "action": self.action}
        if self.ad_id is not None:
            out["adId"] = self.ad_id
        return out


def _parse_event(value: Any) -> SyncEvent | None:
    try:
        return SyncEvent(value)
    except ValueError:
        return None


def _discord_id(payload: dict[str, Any], name: str) -> str | None:
    return check_length(
        optional_str(payload.get(name)), name=name, max_length=MAX_DISCORD_ID_LENGTH
    )


def _author(payload: dict[str, Any]) -> str | None:
    author = optional_str(payload.get("authorName"))
    return author[:MAX_AUTHOR_LENGTH] if author else None


class DiscordAdsReconciler:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._ads = AdRepo(session)
        self._events = DiscordEventRepo(session)

    async def apply(self, payload: dict[str, Any]) -> SyncResult:
        event = _parse_event(payload.get("event"))
        if event is None:
            return await self._log_raw(payload)

        message_id = clean_str(payload.get("messageId"))
        if not message_id:
            raise InvalidArgument("messageId is required.")
        check_length(message_id, name="messageId", max_length=MAX_DISCORD_ID_LENGTH)

        if event is SyncEvent.message_create:
            result = await self._create(message_id, payload)
        elif event is SyncEvent.message_update:
            result = await self._update(message_id, payload)
        else:
            result = await self._delete(message_id)

        await self._session.commit()
        log.info(
            "discord_ad_synced",
            sync_event=event.value,
            message_id=message_id,
            action=result.action,
        )
        return result

    async def _create(self, message_id: str, payload: dict[str, Any]) -> SyncResult:
        title = first_text(payload.get("title"), payload.get("content"))
        if title is None:
            raise InvalidArgument("title or content is required.")
        body = first_text(payload.get("body"), payload.get("content")) or ""

        author_id = _discord_id(payload, "authorId")
        ad, created = await self._ads.upsert_discord(
            message_id=message_id,
            title=title[:MAX_TITLE_LENGTH],
            body=body[:MAX_BODY_LENGTH],
            channel_id=_discord_id(payload, "channelId"),
            author=_author(payload) or author_id,
            created_by=f"discord:{author_id}" if author_id else "discord",
        )
        return SyncResult(action="created" if created else "updated", ad_id=str(ad.id))

    async def _update(self, message_id: str, payload: dict[str, Any]) -> SyncResult:
        ad = await self._ads.get_by_discord_message_id(message_id, for_update=True)
        if ad is None:
            raise NotFound(f"No ad synced for Discord message {message_id}.")

        title = first_text(payload.get("title"), payload.get("content"))
        body = first_text(payload.get("body"), payload.get("content"))
        if title is None and body is None:
            raise InvalidArgument("title, body or content is required.")

        await self._ads.patch(
            ad,
            title=title[:MAX_TITLE_LENGTH] if title is not None else None,
            body=body[:MAX_BODY_LENGTH] if body is not None else None,
            discord_channel_id=_discord_id(payload, "channelId"),
            discord_author=_author(payload),
        )
        return SyncResult(action="updated", ad_id=str(ad.id))

    async def _delete(self, message_id: str) -> SyncResult:
        ad = await self._ads.get_by_discord_message_id(message_id, for_update=True)
        if ad is None:
            # Replays and deletes of never-synced messages are tolerated.
            return SyncResult(action="ignored")
        await self._ads.patch(ad, status=AdStatus.archived)
        return SyncResult(action="archived", ad_id=str(ad.id))

    async def _log_raw(self, payload: dict[str, Any]) -> SyncResult:
        event_type = payload.get("event", payload.get("type"))
        ev = await self._events.add(
            event_type=str(event_type)[:64] if event_type is not None else None,
            payload=payload,
        )
        await self._session.commit()
        log.info("discord_event_logged", event_type=ev.event_type, event_id=str(ev.id))
        return SyncResult(action="logged")


# --- Module Notes -----------------------------------------------------------
# Idempotence comes from keying every event on the Discord message id: a replayed
# create refreshes the same row, a replayed delete re-archives it, and a delete that
# arrives first is a no-op.
