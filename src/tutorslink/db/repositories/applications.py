"""
tutorslink.db.repositories.applications

Repository for `TutorApplication` entities.

Responsibilities:
- Persist submitted applications.
- Query by status for the staff review queue.
- Record approval (status + approver + time) as a partial update.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import ApplicationStatus, TutorApplication, utcnow


class ApplicationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        primary_subject: str,
        teaching_bio: str,
        teaching_experience: str | None,
        country: str | None,
        details: dict[str, Any],
        uid: str | None,
    ) -> TutorApplication:
        app = TutorApplication(
            first_name=first_name,
            last_name=last_name,
            email=email,
            primary_subject=primary_subject,
            teaching_bio=teaching_bio,
            teaching_experience=teaching_experience,
            country=country,
            details=details,
            uid=uid,
            status=ApplicationStatus.pending,
        )
        self._session.add(app)
        await self._session.flush()
        return app

    async def get(self, application_id: uuid.UUID, *, for_update: bool = False) -> TutorApplication | None:
        return await self._session.get(TutorApplication, application_id, with_for_update=for_update)

    async def list_by_status(
        self, status: ApplicationStatus, *, limit: int = 200
    ) -> list[TutorApplication]:
        # Newest first, matching the staff review queue.
        stmt = (
            select(TutorApplication)
            .where(TutorApplication.status == status)
            .order_by(desc(TutorApplication.submitted_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def mark_approved(self, application: TutorApplication, *, approved_by: str) -> None:
        application.status = ApplicationStatus.approved
        application.approved_at = utcnow()
        application.approved_by = approved_by
        await self._session.flush()
