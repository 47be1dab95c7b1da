"""
tutorslink.session.manager

Role session manager (client side).

Responsibilities:
- Own the session state: `unresolved` until the identity provider first reports,
  then one of guest/student/tutor/staff.
- Resolve roles from force-refreshed claims, falling back when the fetch fails.
- On every transition: recompute affordance visibility, then fan out to observers.
- Fire `on_ready` callbacks once start-up completes (including stub mode).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from tutorslink.auth.claims import ClaimsFetchError, IdentityProvider, role_for
from tutorslink.auth.models import Claims, Principal, Role
from tutorslink.observability.logging import get_logger
from tutorslink.session.observers import ObserverChannel, RoleObserver
from tutorslink.session.visibility import VisibilityRegistry

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SessionState:
    # role=None is the `unresolved` state.
    role: Role | None = None
    principal: Principal | None = None

    @property
    def resolved(self) -> bool:
        return self.role is not None


class RoleSessionManager:
    """
    One instance per client session; pass it to consumers instead of reading
    ambient globals.
    """

    def __init__(
        self,
        identity: IdentityProvider | None,
        *,
        admin_email: str | None = None,
        visibility: VisibilityRegistry | None = None,
    ) -> None:
        self._identity = identity
        self._admin_email = admin_email
        self.visibility = visibility or VisibilityRegistry()

        self._state = SessionState()
        self._channels: list[ObserverChannel] = []
        self._ready = False
        self._ready_callbacks: list[Callable[[], None]] = []
        self._unsubscribe: Callable[[], None] | None = None
        # Auth-state events are handled one at a time, in arrival order.
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def role(self) -> Role | None:
        return self._state.role

    @property
    def principal(self) -> Principal | None:
        return self._state.principal

    @property
    def ready(self) -> bool:
        return self._ready

    async def start(self) -> None:
        if self._identity is None:
            log.warning("identity_provider_not_configured", mode="stub")
            await self._transition(Role.guest, None)
        else:
            self._unsubscribe = self._identity.subscribe(self.handle_auth_state)
            await self.handle_auth_state(self._identity.current_principal)
        self._fire_ready()

    async def handle_auth_state(self, principal: Principal | None) -> None:
        async with self._lock:
            if principal is None:
                await self._transition(Role.guest, None)
                return

            claims: Claims | None = None
            if self._identity is not None:
                try:
                    # Claims can change after a grant without a new sign-in.
                    claims = await self._identity.get_claims(principal, force_refresh=True)
                except ClaimsFetchError as e:
                    log.warning("claims_fetch_failed", uid=principal.uid, error=str(e))

            role = role_for(principal, claims, admin_email=self._admin_email)
            await self._transition(role, principal)

    async def _transition(self, role: Role, principal: Principal | None) -> None:
        previous = self._state.role
        self._state = SessionState(role=role, principal=principal)
        self.visibility.apply(role)
        log.info(
            "role_changed",
            role=role.value,
            previous=previous.value if previous else "unresolved",
            uid=principal.uid if principal else None,
        )
        for channel in self._channels:
            channel.push(role, principal)

    def on_role_change(self, callback: RoleObserver) -> Callable[[], None]:
        """
        Register an observer; returns an unsubscribe callable.
        A late registrant immediately receives the current state if it is resolved.
        """

        channel = ObserverChannel(callback)
        self._channels.append(channel)
        if self._state.role is not None:
            channel.push(self._state.role, self._state.principal)

        def _unsubscribe() -> None:
            if channel in self._channels:
                self._channels.remove(channel)
                channel.cancel()

        return _unsubscribe

    def on_ready(self, callback: Callable[[], None]) -> None:
        if self._ready:
            self._call_ready(callback)
        else:
            self._ready_callbacks.append(callback)

    def _fire_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            self._call_ready(callback)

    @staticmethod
    def _call_ready(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            log.exception("ready_callback_failed")

    async def drain(self) -> None:
        # Wait until every queued observer delivery has been processed.
        for channel in list(self._channels):
            await channel.drain()

    async def aclose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for channel in self._channels:
            await channel.close()


# --- Module Notes -----------------------------------------------------------
# Late observers get the current state replayed on registration, so a component
# mounted after sign-in still renders the right role.
