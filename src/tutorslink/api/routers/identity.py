"""
tutorslink.api.routers.identity

Development identity endpoint.

Responsibilities:
- Sign a user in (get-or-create the account, bootstrap admin seeding).
- Mint an identity token carrying the account's current claims. Calling it again
  is how clients force-refresh claims after a privilege grant.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.api.deps import db_session, settings_dep
from tutorslink.auth.jwt import JwtConfig, issue_token
from tutorslink.errors import NotFound
from tutorslink.services.identity import IdentityService
from tutorslink.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["identity"])


class DevTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str = Field(min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=320)
    display_name: str | None = Field(default=None, max_length=256, alias="displayName")
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60, alias="ttlMinutes")


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    uid: str
    claims: dict[str, bool]


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise NotFound("Not found")

    svc = IdentityService(session=session, settings=settings)
    user = await svc.sign_in(uid=body.uid, email=body.email, display_name=body.display_name)
    claims = svc.claims_for(user)

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=user.uid,
        claims=claims,
        email=user.email,
        name=user.display_name,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token, uid=user.uid, claims=claims.as_dict())
