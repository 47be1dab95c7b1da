"""
tutorslink.client.identity

Token-based identity provider for client sessions.

Responsibilities:
- Sign in/out against the identity endpoint and publish auth-state events.
- Force-refresh claims by re-minting the token, then read them at the boundary
  into the closed `Claims` type.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable

import httpx

from tutorslink.auth.claims import AuthStateListener, ClaimsFetchError
from tutorslink.auth.jwt import JwtValidationError, read_unverified
from tutorslink.auth.models import Claims, Principal, principal_from_token
from tutorslink.observability.logging import get_logger

log = get_logger(__name__)

TOKEN_PATH = "/v1/dev/token"


class TokenIdentityProvider:
    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http
        self._listeners: list[AuthStateListener] = []
        self._principal: Principal | None = None
        self._token: str | None = None

    @property
    def current_principal(self) -> Principal | None:
        return self._principal

    @property
    def current_token(self) -> str | None:
        return self._token

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def sign_in(
        self, uid: str, *, email: str | None = None, display_name: str | None = None
    ) -> Principal:
        # Transport errors propagate: a failed sign-in changes no state.
        token = await self._mint(uid, email=email, display_name=display_name)
        self._token = token
        self._principal = principal_from_token(read_unverified(token))
        log.info("signed_in", uid=self._principal.uid)
        await self._emit(self._principal)
        return self._principal

    async def sign_out(self) -> None:
        self._token = None
        self._principal = None
        log.info("signed_out")
        await self._emit(None)

    async def get_claims(self, principal: Principal, *, force_refresh: bool = True) -> Claims:
        try:
            token = self._token
            if force_refresh or token is None:
                token = await self._mint(
                    principal.uid, email=principal.email, display_name=principal.display_name
                )
                # A sign-out or account switch during the mint keeps the newer state.
                if self._principal is not None and self._principal.uid == principal.uid:
                    self._token = token
            return Claims.from_mapping(read_unverified(token))
        except (httpx.HTTPError, JwtValidationError, KeyError, ValueError) as e:
            raise ClaimsFetchError(str(e)) from e

    async def _mint(self, uid: str, *, email: str | None, display_name: str | None) -> str:
        r = await self._http.post(
            TOKEN_PATH,
            json={"uid": uid, "email": email, "displayName": display_name},
        )
        r.raise_for_status()
        return r.json()["access_token"]

    async def _emit(self, principal: Principal | None) -> None:
        # Delivered sequentially, in subscription order.
        for listener in list(self._listeners):
            result = listener(principal)
            if inspect.isawaitable(result):
                await result
