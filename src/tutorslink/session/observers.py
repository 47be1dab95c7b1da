"""
tutorslink.session.observers

Per-observer delivery channels for role-change notifications.

Responsibilities:
- Give each observer its own queue and worker task so a slow or failing
  observer cannot delay or break the others.
- Preserve per-observer ordering of transitions.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable

from tutorslink.auth.models import Principal, Role
from tutorslink.observability.logging import get_logger

log = get_logger(__name__)

RoleObserver = Callable[[Role, Principal | None], Awaitable[None] | None]


class ObserverChannel:
    def __init__(self, callback: RoleObserver) -> None:
        self.callback = callback
        self._queue: asyncio.Queue[tuple[Role, Principal | None]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None

    def push(self, role: Role, principal: Principal | None) -> None:
        self._queue.put_nowait((role, principal))
        self._ensure_worker()

    def _ensure_worker(self) -> None:
        if self._worker is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Registered outside the loop; the worker starts on the next push/drain.
            return
        self._worker = loop.create_task(self._run())

    async def _run(self) -> None:
        while True:
            role, principal = await self._queue.get()
            try:
                result = self.callback(role, principal)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.exception("role_observer_failed", role=role.value)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        self._ensure_worker()
        await self._queue.join()

    def cancel(self) -> None:
        if self._worker is not None:
            self._worker.cancel()

    async def close(self) -> None:
        worker, self._worker = self._worker, None
        if worker is None:
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass
