from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.api.deps import db_session
from tutorslink.auth.deps import get_optional_principal
from tutorslink.auth.models import Principal
from tutorslink.services.ads import AdService

router = APIRouter(prefix="/v1/ads", tags=["ads"])


class AdCreateRequest(BaseModel):
    title: str = ""
    body: str = ""


class AdUpdateRequest(BaseModel):
    title: str | None = None
    body: str | None = None
    status: str | None = None


@router.get("")
async def list_ads(
    include_archived: bool = False,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    return await AdService(session=session).list_ads(
        include_archived=include_archived, caller=caller
    )


@router.post("")
async def create_ad(
    body: AdCreateRequest,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    return await AdService(session=session).create_ad(body.model_dump(), caller=caller)


@router.patch("/{ad_id}")
async def update_ad(
    ad_id: str,
    body: AdUpdateRequest,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    # Only fields present in the request are patched.
    return await AdService(session=session).update_ad(
        ad_id, body.model_dump(exclude_unset=True), caller=caller
    )


@router.post("/{ad_id}/archive")
async def archive_ad(
    ad_id: str,
    caller: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    return await AdService(session=session).archive_ad(ad_id, caller=caller)
