"""
tutorslink.client.functions

HTTP client for the callable functions and the ads/applications REST routes.

Responsibilities:
- Attach the signed-in user's bearer token when there is one.
- Unwrap callable results and map error responses back to the error taxonomy.
- Run in stub mode (log and return canned results) when no HTTP client is configured.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from tutorslink.errors import Unavailable, error_from_payload
from tutorslink.observability.logging import get_logger

log = get_logger(__name__)

STUB_RESULT: dict[str, Any] = {"success": True, "stub": True}


class FunctionsClient:
    """
    UI-facing boundary: pages call these methods and never build requests themselves.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient | None,
        token: Callable[[], str | None] | None = None,
    ) -> None:
        self._http = http
        self._token = token or (lambda: None)

    @property
    def stub(self) -> bool:
        return self._http is None

    def _headers(self) -> dict[str, str]:
        token = self._token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if self._http is None:
            raise Unavailable("Functions client has no HTTP transport configured.")
        try:
            r = await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise Unavailable(f"Network error: {e}") from e
        if not r.is_success:
            try:
                body = r.json()
            except ValueError:
                body = None
            raise error_from_payload(r.status_code, body)
        return r.json()

    async def _call(self, name: str, data: dict[str, Any]) -> dict[str, Any]:
        if self._http is None:
            log.info("callable_stub", name=name, data=data)
            return dict(STUB_RESULT)
        body = await self._request("POST", f"/v1/callable/{name}", json={"data": data})
        return body["result"]

    # Callables

    async def submit_tutor_application(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._call("submitTutorApplication", data)

    async def create_support_chat_message(self, message: str, session_id: str) -> dict[str, Any]:
        return await self._call(
            "createSupportChatMessage", {"message": message, "sessionId": session_id}
        )

    async def book_demo_class(
        self, tutor_id: str | int, meta: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self._call("bookDemoClass", {"tutorId": tutor_id, "meta": meta or {}})

    async def approve_tutor_application(
        self, uid: str, application_id: str | None = None
    ) -> dict[str, Any]:
        return await self._call(
            "approveTutorApplication", {"uid": uid, "applicationId": application_id}
        )

    # Staff review queue and ads

    async def list_pending_applications(self) -> list[dict[str, Any]]:
        if self._http is None:
            log.info("callable_stub", name="listPendingApplications")
            return []
        return await self._request("GET", "/v1/applications/pending")

    async def list_ads(self, *, include_archived: bool = False) -> list[dict[str, Any]]:
        if self._http is None:
            log.info("callable_stub", name="listAds")
            return []
        params = {"include_archived": "true"} if include_archived else None
        return await self._request("GET", "/v1/ads", params=params)

    async def create_ad(self, *, title: str, body: str = "") -> dict[str, Any]:
        if self._http is None:
            log.info("callable_stub", name="createAd", title=title)
            return dict(STUB_RESULT)
        return await self._request("POST", "/v1/ads", json={"title": title, "body": body})

    async def update_ad(self, ad_id: str, **fields: Any) -> dict[str, Any]:
        if self._http is None:
            log.info("callable_stub", name="updateAd", ad_id=ad_id)
            return dict(STUB_RESULT)
        return await self._request("PATCH", f"/v1/ads/{ad_id}", json=fields)

    async def archive_ad(self, ad_id: str) -> dict[str, Any]:
        if self._http is None:
            log.info("callable_stub", name="archiveAd", ad_id=ad_id)
            return dict(STUB_RESULT)
        return await self._request("POST", f"/v1/ads/{ad_id}/archive")


# --- Module Notes -----------------------------------------------------------
# Pair with `TokenIdentityProvider.current_token` as the `token` supplier so calls
# carry whichever user is signed in at call time.
