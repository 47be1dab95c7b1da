"""
tutorslink.services.workflows

Application/booking workflow functions behind the callable endpoints.

Responsibilities:
- Validate payloads and persist tutor applications, demo bookings, chat messages.
- Approve tutor applications (staff only): merge the tutor claim and mark approval.
- Produce the advisory notification for the API layer to dispatch after commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.auth.gate import require_staff
from tutorslink.auth.models import Principal
from tutorslink.db.models import ApplicationStatus, TutorApplication
from tutorslink.db.repositories.applications import ApplicationRepo
from tutorslink.db.repositories.submissions import BookingRepo, ChatMessageRepo
from tutorslink.db.repositories.users import UserRepo
from tutorslink.errors import InvalidArgument, NotFound
from tutorslink.notifier.discord import Embed, EmbedField
from tutorslink.observability.logging import get_logger
from tutorslink.services.validation import (
    check_length,
    clean_str,
    optional_str,
    parse_id,
    require_fields,
    require_mapping,
)

log = get_logger(__name__)

REQUIRED_APPLICATION_FIELDS = ("firstName", "lastName", "email", "primarySubject", "teachingBio")
_APPLICATION_COLUMNS = {*REQUIRED_APPLICATION_FIELDS, "teachingExperience", "country"}
# Server-owned fields a client can't set through the payload.
_RESERVED_APPLICATION_FIELDS = {"status", "submittedAt", "uid", "approvedAt", "approvedBy"}
# Column widths of the bounded application fields.
_APPLICATION_FIELD_LIMITS = {
    "firstName": 256,
    "lastName": 256,
    "email": 320,
    "primarySubject": 256,
    "teachingExperience": 256,
    "country": 128,
}

MAX_CHAT_MESSAGE_LENGTH = 2000
MAX_SESSION_ID_LENGTH = 64
MAX_TUTOR_ID_LENGTH = 128
MAX_TUTOR_NAME_LENGTH = 256

APPLICATION_COLOR = 0xFFD700
BOOKING_COLOR = 0xFF1493


@dataclass(frozen=True, slots=True)
class WorkflowOutcome:
    result: dict[str, Any]
    notification: Embed | None = None


def application_to_dict(app: TutorApplication) -> dict[str, Any]:
    return {
        **app.details,
        "id": str(app.id),
        "firstName": app.first_name,
        "lastName": app.last_name,
        "email": app.email,
        "primarySubject": app.primary_subject,
        "teachingBio": app.teaching_bio,
        "teachingExperience": app.teaching_experience,
        "country": app.country,
        "status": app.status.value,
        "uid": app.uid,
        "submittedAt": app.submitted_at.isoformat(),
        "approvedAt": app.approved_at.isoformat() if app.approved_at else None,
        "approvedBy": app.approved_by,
    }


class WorkflowService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._applications = ApplicationRepo(session)
        self._bookings = BookingRepo(session)
        self._messages = ChatMessageRepo(session)
        self._users = UserRepo(session)

    async def submit_tutor_application(
        self, data: Any, *, caller: Principal | None
    ) -> WorkflowOutcome:
        data = require_mapping(data)
        require_fields(data, REQUIRED_APPLICATION_FIELDS)
        for name, limit in _APPLICATION_FIELD_LIMITS.items():
            check_length(optional_str(data.get(name)), name=name, max_length=limit)

        details = {
            k: v
            for k, v in data.items()
            if k not in _APPLICATION_COLUMNS and k not in _RESERVED_APPLICATION_FIELDS
        }
        app = await self._applications.create(
            first_name=clean_str(data["firstName"]),
            last_name=clean_str(data["lastName"]),
            email=clean_str(data["email"]),
            primary_subject=clean_str(data["primarySubject"]),
            teaching_bio=clean_str(data["teachingBio"]),
            teaching_experience=optional_str(data.get("teachingExperience")),
            country=optional_str(data.get("country")),
            details=details,
            uid=caller.uid if caller else None,
        )
        await self._session.commit()
        log.info("tutor_application_submitted", application_id=str(app.id), email=app.email)

        embed = Embed(
            title="📋 New Tutor Application",
            description=(
                f"**{app.first_name} {app.last_name}** applied to teach **{app.primary_subject}**."
            ),
            color=APPLICATION_COLOR,
            fields=[
                EmbedField(name="Email", value=app.email),
                EmbedField(name="Country", value=app.country or "N/A"),
                EmbedField(name="Experience", value=app.teaching_experience or "N/A"),
            ],
        )
        return WorkflowOutcome(
            result={"success": True, "applicationId": str(app.id)},
            notification=embed,
        )

    async def create_support_chat_message(
        self, data: Any, *, caller: Principal | None
    ) -> WorkflowOutcome:
        data = require_mapping(data)
        text = clean_str(data.get("message"))
        if not text:
            raise InvalidArgument("Message is required.")

        session_id = str(data.get("sessionId") or "unknown")[:MAX_SESSION_ID_LENGTH]
        msg = await self._messages.add(
            message=text[:MAX_CHAT_MESSAGE_LENGTH],
            session_id=session_id,
            uid=caller.uid if caller else None,
        )
        await self._session.commit()
        log.info("chat_message_stored", message_id=str(msg.id), session_id=session_id)
        return WorkflowOutcome(result={"success": True, "messageId": str(msg.id)})

    async def book_demo_class(self, data: Any, *, caller: Principal | None) -> WorkflowOutcome:
        data = require_mapping(data)
        tutor_id = clean_str(data.get("tutorId"))
        if not tutor_id:
            raise InvalidArgument("tutorId is required.")
        check_length(tutor_id, name="tutorId", max_length=MAX_TUTOR_ID_LENGTH)

        meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
        booking = await self._bookings.create(
            tutor_id=tutor_id,
            tutor_name=(clean_str(meta.get("tutorName")) or "Unknown")[:MAX_TUTOR_NAME_LENGTH],
            subject=(clean_str(meta.get("subject")) or "Unknown")[:MAX_TUTOR_NAME_LENGTH],
            uid=caller.uid if caller else None,
        )
        await self._session.commit()
        log.info("demo_booking_created", booking_id=str(booking.id), tutor_id=tutor_id)

        embed = Embed(
            title="🎓 New Demo Booking",
            description=(
                f"A student booked a free demo with **{booking.tutor_name}** ({booking.subject})."
            ),
            color=BOOKING_COLOR,
            fields=[
                EmbedField(name="Tutor ID", value=booking.tutor_id),
                EmbedField(name="Status", value=booking.status.value),
            ],
        )
        return WorkflowOutcome(
            result={"success": True, "bookingId": str(booking.id)},
            notification=embed,
        )

    async def approve_tutor_application(
        self, data: Any, *, caller: Principal | None
    ) -> WorkflowOutcome:
        caller = require_staff(caller, message="Only staff can approve tutor applications.")
        data = require_mapping(data)

        uid = clean_str(data.get("uid"))
        if not uid:
            raise InvalidArgument("uid is required.")

        # Resolve every target before writing so a missing one leaves nothing half-applied.
        application = None
        if data.get("applicationId"):
            application_id = parse_id(data["applicationId"], what="Tutor application")
            application = await self._applications.get(application_id, for_update=True)
            if application is None:
                raise NotFound("Tutor application not found.")

        merged = await self._users.merge_custom_claims(uid, {"tutor": True})
        if merged is None:
            raise NotFound(f"No user record for uid {uid}.")

        if application is not None:
            await self._applications.mark_approved(application, approved_by=caller.uid)

        await self._session.commit()
        log.info(
            "tutor_approved",
            uid=uid,
            approved_by=caller.uid,
            application_id=str(application.id) if application else None,
        )
        return WorkflowOutcome(result={"success": True})

    async def list_pending_applications(self, *, caller: Principal | None) -> list[dict[str, Any]]:
        require_staff(caller, message="Only staff can review tutor applications.")
        apps = await self._applications.list_by_status(ApplicationStatus.pending)
        return [application_to_dict(a) for a in apps]


# --- Module Notes -----------------------------------------------------------
# Notifications are returned rather than sent; the router schedules them as
# background tasks that run after the write has committed.
