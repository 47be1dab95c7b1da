"""
tutorslink.api.routers.callables

Callable function endpoints (`POST /v1/callable/{name}`).

Responsibilities:
- Accept `{"data": {...}}`, resolve the optional caller, delegate to `WorkflowService`.
- Return `{"result": {...}}` and schedule advisory notifications after the commit.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.api.deps import db_session, notifier_dep
from tutorslink.auth.deps import get_optional_principal
from tutorslink.auth.models import Principal
from tutorslink.notifier.discord import DiscordNotifier
from tutorslink.services.workflows import WorkflowOutcome, WorkflowService

router = APIRouter(prefix="/v1/callable", tags=["callable"])


class CallableRequest(BaseModel):
    data: Any = None


class CallableResponse(BaseModel):
    result: dict[str, Any]


def _data(body: CallableRequest | None) -> Any:
    return body.data if body is not None else None


def _respond(
    outcome: WorkflowOutcome, background: BackgroundTasks, notifier: DiscordNotifier
) -> CallableResponse:
    if outcome.notification is not None:
        background.add_task(notifier.notify, outcome.notification)
    return CallableResponse(result=outcome.result)


@router.post("/submitTutorApplication", response_model=CallableResponse)
async def submit_tutor_application(
    background: BackgroundTasks,
    body: CallableRequest | None = None,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
    notifier: DiscordNotifier = Depends(notifier_dep),
) -> CallableResponse:
    outcome = await WorkflowService(session=session).submit_tutor_application(
        _data(body), caller=caller
    )
    return _respond(outcome, background, notifier)


@router.post("/createSupportChatMessage", response_model=CallableResponse)
async def create_support_chat_message(
    background: BackgroundTasks,
    body: CallableRequest | None = None,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
    notifier: DiscordNotifier = Depends(notifier_dep),
) -> CallableResponse:
    outcome = await WorkflowService(session=session).create_support_chat_message(
        _data(body), caller=caller
    )
    return _respond(outcome, background, notifier)


@router.post("/bookDemoClass", response_model=CallableResponse)
async def book_demo_class(
    background: BackgroundTasks,
    body: CallableRequest | None = None,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
    notifier: DiscordNotifier = Depends(notifier_dep),
) -> CallableResponse:
    outcome = await WorkflowService(session=session).book_demo_class(_data(body), caller=caller)
    return _respond(outcome, background, notifier)


@router.post("/approveTutorApplication", response_model=CallableResponse)
async def approve_tutor_application(
    background: BackgroundTasks,
    body: CallableRequest | None = None,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
    notifier: DiscordNotifier = Depends(notifier_dep),
) -> CallableResponse:
    # Staff gate is enforced inside the service.
    outcome = await WorkflowService(session=session).approve_tutor_application(
        _data(body), caller=caller
    )
    return _respond(outcome, background, notifier)
