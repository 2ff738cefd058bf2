"""Repository utilities for persisting call history."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import desc, or_, select
from sqlalchemy.exc import NoResultFound

from db.base import AsyncSessionFactory
from db.models import CallHistory
from signaling.errors import CallNotFoundError


class CallHistoryRepository:
    """Async repository encapsulating call-history storage operations."""

    async def start_call(
        self,
        call_id: str,
        *,
        initiator_id: str,
        participant_id: str,
        call_type: str = "VIDEO",
        start_time: datetime | None = None,
    ) -> CallHistory:
        async with AsyncSessionFactory() as session:
            call = CallHistory(
                id=call_id,
                initiator_id=initiator_id,
                participant_id=participant_id,
                call_type=call_type,
                start_time=start_time or datetime.now(timezone.utc),
            )
            session.add(call)
            await session.commit()
            await session.refresh(call)
            return call

    async def end_call(self, call_id: str, *, end_time: datetime | None = None) -> CallHistory:
        async with AsyncSessionFactory() as session:
            call = await self._get_call(session, call_id)
            call.end_time = end_time or datetime.now(timezone.utc)
            await session.commit()
            await session.refresh(call)
            return call

    async def get_call(self, call_id: str) -> CallHistory:
        async with AsyncSessionFactory() as session:
            return await self._get_call(session, call_id)

    async def _get_call(self, session, call_id: str) -> CallHistory:
        query = select(CallHistory).where(CallHistory.id == call_id)
        result = await session.execute(query)
        try:
            return result.scalar_one()
        except NoResultFound as exc:
            raise CallNotFoundError(f"Call {call_id} not found") from exc

    async def list_calls_for_user(self, user_id: str, *, limit: int = 50) -> list[CallHistory]:
        async with AsyncSessionFactory() as session:
            query = (
                select(CallHistory)
                .where(or_(CallHistory.initiator_id == user_id, CallHistory.participant_id == user_id))
                .order_by(desc(CallHistory.start_time), desc(CallHistory.id))
                .limit(limit)
            )
            result = await session.execute(query)
            return list(result.scalars().all())
