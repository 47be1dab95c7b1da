"""
tutorslink.db.models

Persistence schema for the marketplace core.

Responsibilities:
- Define ORM models for each collection:
  - UserAccount: identity record with custom claims
  - TutorApplication: submitted applications awaiting staff approval
  - DemoBooking / ChatMessage: append-only user submissions
  - Ad: announcements from the website or synced from Discord
  - DiscordEvent: raw payloads of unrecognised sync events
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, String, Text, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from tutorslink.db.base import Base


def utcnow() -> datetime:
    # Assigned by the service at write time; naive UTC for portability across backends.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class ApplicationStatus(enum.StrEnum):
    pending = "pending"
    approved = "approved"


class BookingStatus(enum.StrEnum):
    pending_confirmation = "pending_confirmation"


class AdSource(enum.StrEnum):
    website = "website"
    discord = "discord"


class AdStatus(enum.StrEnum):
    active = "active"
    archived = "archived"


class UserAccount(Base):
    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    # Open map: merges must keep keys this service does not know about.
    custom_claims: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class TutorApplication(Base):
    __tablename__ = "tutor_applications"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    first_name: Mapped[str] = mapped_column(String(256), nullable=False)
    last_name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    primary_subject: Mapped[str] = mapped_column(String(256), nullable=False)
    teaching_bio: Mapped[str] = mapped_column(Text, nullable=False)
    teaching_experience: Mapped[str | None] = mapped_column(String(256), nullable=True)
    country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # Any additional form fields, stored verbatim.
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus), nullable=False, index=True
    )
    uid: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    submitted_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (Index("ix_applications_status_submitted", "status", "submitted_at"),)


class DemoBooking(Base):
    __tablename__ = "demo_bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tutor_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tutor_name: Mapped[str] = mapped_column(String(256), nullable=False)
    subject: Mapped[str] = mapped_column(String(256), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus), nullable=False)
    uid: Mapped[str | None] = mapped_column(String(128), nullable=True)

    booked_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    uid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")

    sent_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class Ad(Base):
    __tablename__ = "ads"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    source: Mapped[AdSource] = mapped_column(Enum(AdSource), nullable=False)
    status: Mapped[AdStatus] = mapped_column(Enum(AdStatus), nullable=False, index=True)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Discord-only fields. The unique constraint is the dedup key for the sync webhook.
    discord_message_id: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    discord_channel_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    discord_author: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_ads_status_created", "status", "created_at"),)


class DiscordEvent(Base):
    __tablename__ = "discord_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    event_type: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    received_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)


# --- Module Notes -----------------------------------------------------------
# Nothing here is ever hard-deleted: ads are archived via status, applications move
# to approved, and bookings/messages/events are append-only.
