from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from tutorslink.db.models import BookingStatus, ChatMessage, DemoBooking


class BookingRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, tutor_id: str, tutor_name: str, subject: str, uid: str | None
    ) -> DemoBooking:
        booking = DemoBooking(
            tutor_id=tutor_id,
            tutor_name=tutor_name,
            subject=subject,
            uid=uid,
            status=BookingStatus.pending_confirmation,
        )
        self._session.add(booking)
        await self._session.flush()
        return booking


class ChatMessageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, message: str, session_id: str, uid: str | None) -> ChatMessage:
        # Append-only log; there is no update or delete path.
        msg = ChatMessage(message=message, session_id=session_id, uid=uid, role="user")
        self._session.add(msg)
        await self._session.flush()
        return msg
