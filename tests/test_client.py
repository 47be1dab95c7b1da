"""
tests.test_client

Client SDK end to end against the in-process app: sign-in, role resolution,
callables, and error mapping.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tutorslink.auth.jwt import JwtConfig, issue_token
from tutorslink.auth.models import Claims, Principal, Role
from tutorslink.client import FunctionsClient, TokenIdentityProvider, friendly_auth_error
from tutorslink.errors import InvalidArgument, NotFound, PermissionDenied, Unavailable
from tutorslink.session import RoleSessionManager

ADMIN_EMAIL = "admin@tutorslink.test"


async def _session(client: httpx.AsyncClient):
    identity = TokenIdentityProvider(http=client)
    manager = RoleSessionManager(identity)
    functions = FunctionsClient(http=client, token=lambda: identity.current_token)
    await manager.start()
    return identity, manager, functions


@pytest.mark.asyncio
async def test_stub_mode_returns_canned_results() -> None:
    functions = FunctionsClient(http=None)
    assert functions.stub
    assert await functions.book_demo_class("t-1") == {"success": True, "stub": True}
    assert await functions.list_pending_applications() == []
    assert await functions.list_ads() == []
    with pytest.raises(Unavailable):
        await functions._request("GET", "/v1/ads")


@pytest.mark.asyncio
async def test_application_to_tutor_flow(client) -> None:
    s_identity, s_manager, s_functions = await _session(client)
    a_identity, a_manager, a_functions = await _session(client)
    assert s_manager.role is Role.guest

    await a_identity.sign_in("admin-1", email=ADMIN_EMAIL)
    assert a_manager.role is Role.staff

    await s_identity.sign_in("student-1", email="s1@example.com", display_name="Sam")
    assert s_manager.role is Role.student
    assert s_manager.principal.display_name == "Sam"

    result = await s_functions.submit_tutor_application(
        {
            "firstName": "Sam",
            "lastName": "Student",
            "email": "s1@example.com",
            "primarySubject": "Biology",
            "teachingBio": "Lab demonstrator.",
        }
    )
    application_id = result["applicationId"]

    with pytest.raises(PermissionDenied):
        await s_functions.approve_tutor_application("student-1", application_id)

    (pending,) = await a_functions.list_pending_applications()
    assert pending["id"] == application_id
    assert pending["uid"] == "student-1"

    assert await a_functions.approve_tutor_application("student-1", application_id) == {
        "success": True
    }
    assert await a_functions.list_pending_applications() == []

    # The grant is picked up on the next claims refresh, without signing in again.
    assert s_manager.role is Role.student
    await s_manager.handle_auth_state(s_identity.current_principal)
    assert s_manager.role is Role.tutor

    await s_identity.sign_out()
    assert s_manager.role is Role.guest
    assert s_identity.current_token is None

    await s_manager.aclose()
    await a_manager.aclose()


@pytest.mark.asyncio
async def test_ads_through_client(client) -> None:
    identity, manager, functions = await _session(client)
    await identity.sign_in("admin-1", email=ADMIN_EMAIL)

    ad = await functions.create_ad(title="Need a chemistry tutor", body="Online")
    ad = await functions.update_ad(ad["id"], body="In person")
    assert ad["body"] == "In person"
    await functions.archive_ad(ad["id"])

    assert await functions.list_ads() == []
    (archived,) = await functions.list_ads(include_archived=True)
    assert archived["status"] == "archived"
    await manager.aclose()


@pytest.mark.asyncio
async def test_error_responses_map_to_typed_errors(client) -> None:
    identity, manager, functions = await _session(client)

    with pytest.raises(InvalidArgument, match="lastName"):
        await functions.submit_tutor_application({"firstName": "x"})

    await identity.sign_in("admin-1", email=ADMIN_EMAIL)
    with pytest.raises(NotFound):
        await functions.approve_tutor_application("nobody")
    await manager.aclose()


@pytest.mark.asyncio
async def test_network_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test"
    ) as http:
        functions = FunctionsClient(http=http)
        with pytest.raises(Unavailable):
            await functions.create_support_chat_message("hello", "s-1")


@pytest.mark.asyncio
async def test_claims_fetch_failure_keeps_session_usable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test"
    ) as http:
        identity = TokenIdentityProvider(http=http)
        manager = RoleSessionManager(identity, admin_email=ADMIN_EMAIL)
        await manager.start()
        await manager.handle_auth_state(Principal(uid="u1", email=ADMIN_EMAIL))
        assert manager.role is Role.staff
        await manager.handle_auth_state(Principal(uid="u2", email="u2@example.com"))
        assert manager.role is Role.student
        await manager.aclose()


@pytest.mark.parametrize(
    ("code", "message"),
    [
        ("auth/wrong-password", "Incorrect password."),
        ("auth/weak-password", "Password must be at least 6 characters."),
        ("auth/something-new", "An error occurred. Please try again."),
        (None, "An error occurred. Please try again."),
    ],
)
def test_friendly_auth_error(code, message: str) -> None:
    assert friendly_auth_error(code) == message


@pytest.mark.asyncio
async def test_sign_out_during_claims_refresh_keeps_token_cleared() -> None:
    cfg = JwtConfig(alg="HS256", issuer="tutorslink-identity", audience="tutorslink", secret="k")
    token = issue_token(cfg=cfg, subject="u1", claims=Claims(tutor=True))
    minting = asyncio.Event()
    release = asyncio.Event()
    mints = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal mints
        mints += 1
        if mints > 1:
            minting.set()
            await release.wait()
        return httpx.Response(200, json={"access_token": token})

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test"
    ) as http:
        identity = TokenIdentityProvider(http=http)
        principal = await identity.sign_in("u1")
        refresh = asyncio.create_task(identity.get_claims(principal))
        await asyncio.wait_for(minting.wait(), timeout=1)

        await identity.sign_out()
        release.set()
        claims = await refresh

    assert claims == Claims(tutor=True)
    assert identity.current_principal is None
    assert identity.current_token is None
