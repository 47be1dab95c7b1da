from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.api.deps import db_session
from tutorslink.auth.deps import get_staff_principal
from tutorslink.auth.models import Principal
from tutorslink.services.workflows import WorkflowService

router = APIRouter(prefix="/v1/applications", tags=["applications"])


@router.get("/pending")
async def list_pending_applications(
    caller: Principal = Depends(get_staff_principal),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    return await WorkflowService(session=session).list_pending_applications(caller=caller)
