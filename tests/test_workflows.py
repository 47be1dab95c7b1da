from __future__ import annotations

import json

import pytest
from sqlalchemy import func, select

from tutorslink.db.models import ApplicationStatus, ChatMessage, DemoBooking, TutorApplication
from tutorslink.db.repositories.users import UserRepo

ADMIN_EMAIL = "admin@tutorslink.test"

APPLICATION = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "primarySubject": "Mathematics",
    "teachingBio": "Analytical engines and more.",
    "country": "UK",
    "hourlyRate": 40,
}


async def _call(client, name: str, data, headers=None):
    return await client.post(f"/v1/callable/{name}", json={"data": data}, headers=headers or {})


async def _count(sessionmaker, model) -> int:
    async with sessionmaker() as s:
        return await s.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_submit_application_anonymous(client, sessionmaker, discord_requests) -> None:
    r = await _call(client, "submitTutorApplication", {**APPLICATION, "status": "approved"})
    assert r.status_code == 200
    result = r.json()["result"]
    assert result["success"] is True

    async with sessionmaker() as s:
        app = (await s.scalars(select(TutorApplication))).one()
    assert str(app.id) == result["applicationId"]
    assert app.status is ApplicationStatus.pending
    assert app.uid is None
    assert app.details == {"hourlyRate": 40}

    assert len(discord_requests) == 1
    embed = json.loads(discord_requests[0].content)["embeds"][0]
    assert "Tutor Application" in embed["title"]


@pytest.mark.asyncio
async def test_submit_application_records_caller_uid(client, sessionmaker, sign_in) -> None:
    headers = await sign_in("student-1", "s1@example.com")
    r = await _call(client, "submitTutorApplication", APPLICATION, headers)
    assert r.status_code == 200

    async with sessionmaker() as s:
        app = (await s.scalars(select(TutorApplication))).one()
    assert app.uid == "student-1"


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [None, "", "   "])
async def test_submit_application_missing_field(
    client, sessionmaker, discord_requests, value
) -> None:
    data = {**APPLICATION}
    if value is None:
        del data["email"]
    else:
        data["email"] = value

    r = await _call(client, "submitTutorApplication", data)
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["status"] == "INVALID_ARGUMENT"
    assert "email" in error["message"]
    assert await _count(sessionmaker, TutorApplication) == 0
    assert discord_requests == []


@pytest.mark.asyncio
async def test_callable_requires_data_object(client) -> None:
    r = await _call(client, "submitTutorApplication", ["not", "an", "object"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_chat_message_is_truncated(client, sessionmaker, discord_requests) -> None:
    r = await _call(
        client,
        "createSupportChatMessage",
        {"message": "x" * 5000, "sessionId": "s" * 100},
    )
    assert r.status_code == 200

    async with sessionmaker() as s:
        msg = (await s.scalars(select(ChatMessage))).one()
    assert len(msg.message) == 2000
    assert len(msg.session_id) == 64
    assert msg.role == "user"
    assert msg.uid is None
    assert discord_requests == []


@pytest.mark.asyncio
async def test_chat_message_defaults_session(client, sessionmaker) -> None:
    r = await _call(client, "createSupportChatMessage", {"message": "  hello  "})
    assert r.status_code == 200

    async with sessionmaker() as s:
        msg = (await s.scalars(select(ChatMessage))).one()
    assert msg.message == "hello"
    assert msg.session_id == "unknown"


@pytest.mark.asyncio
async def test_chat_message_rejects_blank(client, sessionmaker) -> None:
    r = await _call(client, "createSupportChatMessage", {"message": "   "})
    assert r.status_code == 400
    assert await _count(sessionmaker, ChatMessage) == 0


@pytest.mark.asyncio
async def test_book_demo_class(client, sessionmaker, sign_in, discord_requests) -> None:
    headers = await sign_in("student-2")
    r = await _call(
        client,
        "bookDemoClass",
        {"tutorId": 7, "meta": {"tutorName": "Grace", "subject": "Physics"}},
        headers,
    )
    assert r.status_code == 200

    async with sessionmaker() as s:
        booking = (await s.scalars(select(DemoBooking))).one()
    assert str(booking.id) == r.json()["result"]["bookingId"]
    assert booking.tutor_id == "7"
    assert booking.tutor_name == "Grace"
    assert booking.status.value == "pending_confirmation"
    assert booking.uid == "student-2"
    assert len(discord_requests) == 1


@pytest.mark.asyncio
async def test_book_demo_class_defaults_and_validation(client, sessionmaker) -> None:
    r = await _call(client, "bookDemoClass", {"meta": {"tutorName": "Grace"}})
    assert r.status_code == 400

    r = await _call(client, "bookDemoClass", {"tutorId": "t-1"})
    assert r.status_code == 200
    async with sessionmaker() as s:
        booking = (await s.scalars(select(DemoBooking))).one()
    assert booking.tutor_name == "Unknown"
    assert booking.subject == "Unknown"


@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_callable(
    client, sessionmaker, discord_status, discord_requests
) -> None:
    discord_status["code"] = 500
    r = await _call(client, "bookDemoClass", {"tutorId": "t-1"})
    assert r.status_code == 200
    assert len(discord_requests) == 1
    assert await _count(sessionmaker, DemoBooking) == 1


@pytest.mark.asyncio
async def test_invalid_token_is_unauthenticated(client) -> None:
    r = await _call(
        client, "bookDemoClass", {"tutorId": "t-1"}, {"Authorization": "Bearer not-a-jwt"}
    )
    assert r.status_code == 401
    assert r.json()["error"]["status"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_approve_requires_staff(client, sessionmaker, sign_in) -> None:
    student = await sign_in("student-3", "s3@example.com")
    r = await _call(client, "submitTutorApplication", APPLICATION, student)
    application_id = r.json()["result"]["applicationId"]

    for headers in (student, {}):
        r = await _call(
            client,
            "approveTutorApplication",
            {"uid": "student-3", "applicationId": application_id},
            headers,
        )
        assert r.status_code == 403
        assert r.json()["error"]["status"] == "PERMISSION_DENIED"

    async with sessionmaker() as s:
        user = await UserRepo(s).get("student-3")
        app = (await s.scalars(select(TutorApplication))).one()
    assert user.custom_claims == {}
    assert app.status is ApplicationStatus.pending


@pytest.mark.asyncio
async def test_approve_grants_tutor_and_marks_application(
    client, sessionmaker, sign_in, staff_headers
) -> None:
    student = await sign_in("student-4", "s4@example.com")
    r = await _call(client, "submitTutorApplication", APPLICATION, student)
    application_id = r.json()["result"]["applicationId"]

    r = await _call(
        client,
        "approveTutorApplication",
        {"uid": "student-4", "applicationId": application_id},
        staff_headers,
    )
    assert r.status_code == 200
    assert r.json()["result"] == {"success": True}

    async with sessionmaker() as s:
        user = await UserRepo(s).get("student-4")
        app = (await s.scalars(select(TutorApplication))).one()
    assert user.custom_claims == {"tutor": True}
    assert app.status is ApplicationStatus.approved
    assert app.approved_by == "admin-1"
    assert app.approved_at is not None

    # A fresh token now carries the tutor claim.
    r = await client.post("/v1/dev/token", json={"uid": "student-4"})
    assert r.json()["claims"] == {"staff": False, "tutor": True}


@pytest.mark.asyncio
async def test_approve_preserves_existing_claims(client, sessionmaker, staff_headers) -> None:
    async with sessionmaker() as s:
        await UserRepo(s).create(
            uid="helper-1",
            email="helper@example.com",
            display_name=None,
            custom_claims={"staff": True, "beta": True},
        )
        await s.commit()

    r = await _call(client, "approveTutorApplication", {"uid": "helper-1"}, staff_headers)
    assert r.status_code == 200

    async with sessionmaker() as s:
        user = await UserRepo(s).get("helper-1")
    assert user.custom_claims == {"staff": True, "beta": True, "tutor": True}


@pytest.mark.asyncio
async def test_approve_unknown_targets(client, sessionmaker, sign_in, staff_headers) -> None:
    r = await _call(client, "approveTutorApplication", {"uid": "ghost"}, staff_headers)
    assert r.status_code == 404

    await sign_in("student-5")
    r = await _call(
        client,
        "approveTutorApplication",
        {"uid": "student-5", "applicationId": "00000000-0000-0000-0000-000000000000"},
        staff_headers,
    )
    assert r.status_code == 404
    async with sessionmaker() as s:
        user = await UserRepo(s).get("student-5")
    assert user.custom_claims == {}

    r = await _call(client, "approveTutorApplication", {}, staff_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_pending_applications_are_staff_only(client, sign_in, staff_headers) -> None:
    await _call(client, "submitTutorApplication", APPLICATION)
    await _call(client, "submitTutorApplication", {**APPLICATION, "firstName": "Grace"})

    r = await client.get("/v1/applications/pending")
    assert r.status_code == 403

    r = await client.get("/v1/applications/pending", headers=staff_headers)
    assert r.status_code == 200
    assert sorted(a["firstName"] for a in r.json()) == ["Ada", "Grace"]
    assert all(a["status"] == "pending" for a in r.json())


@pytest.mark.asyncio
async def test_bootstrap_admin_is_seeded_once(client) -> None:
    r = await client.post("/v1/dev/token", json={"uid": "admin-1", "email": ADMIN_EMAIL})
    assert r.json()["claims"]["staff"] is True

    r = await client.post("/v1/dev/token", json={"uid": "other", "email": "other@example.com"})
    assert r.json()["claims"] == {"staff": False, "tutor": False}


@pytest.mark.asyncio
@pytest.mark.parametrize(("field", "limit"), [("email", 320), ("firstName", 256), ("country", 128)])
async def test_submit_application_rejects_overlong_fields(
    client, sessionmaker, field: str, limit: int
) -> None:
    r = await _call(client, "submitTutorApplication", {**APPLICATION, field: "x" * (limit + 1)})
    assert r.status_code == 400
    assert field in r.json()["error"]["message"]
    assert await _count(sessionmaker, TutorApplication) == 0


@pytest.mark.asyncio
async def test_book_demo_class_bounds(client, sessionmaker) -> None:
    r = await _call(client, "bookDemoClass", {"tutorId": "t" * 129})
    assert r.status_code == 400
    assert await _count(sessionmaker, DemoBooking) == 0

    r = await _call(client, "bookDemoClass", {"tutorId": "t-1", "meta": {"tutorName": "n" * 400}})
    assert r.status_code == 200
    async with sessionmaker() as s:
        booking = (await s.scalars(select(DemoBooking))).one()
    assert booking.tutor_name == "n" * 256
