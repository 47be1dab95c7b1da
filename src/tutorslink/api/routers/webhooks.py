"""
tutorslink.api.routers.webhooks

Inbound webhook endpoints.

Responsibilities:
- `syncDiscordAdsWebhook`: method check, shared-secret check, then hand the JSON
  payload to `DiscordAdsReconciler`.
"""

from __future__ import annotations

import hmac
import json
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.api.deps import db_session, settings_dep
from tutorslink.errors import InvalidArgument, MethodNotAllowed, Unauthorized
from tutorslink.observability.logging import get_logger
from tutorslink.services.reconciler import DiscordAdsReconciler
from tutorslink.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/webhooks", tags=["webhooks"])


def secret_matches(expected: str, provided: str | None) -> bool:
    # An unconfigured secret rejects everything.
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())


@router.api_route("/syncDiscordAdsWebhook", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def sync_discord_ads_webhook(
    request: Request,
    x_sync_secret: str | None = Header(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if request.method != "POST":
        raise MethodNotAllowed("Method Not Allowed")
    # Checked before the body is read.
    if not secret_matches(settings.sync_secret, x_sync_secret):
        log.warning("sync_webhook_bad_secret")
        raise Unauthorized("Invalid sync secret.")

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidArgument("Body must be valid JSON.") from e
    if not isinstance(payload, dict):
        raise InvalidArgument("Body must be a JSON object.")

    log.info(
        "sync_webhook_received",
        sync_event=payload.get("event"),
        message_id=payload.get("messageId"),
    )
    result = await DiscordAdsReconciler(session=session).apply(payload)
    return result.to_response()


# --- Module Notes -----------------------------------------------------------
# Delivery is at-least-once, so every accepted payload must be safe to replay; see
# `services.reconciler` for how each event kind stays idempotent.
