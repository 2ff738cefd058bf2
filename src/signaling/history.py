"""Fire-and-forget call-history recording for the signaling path."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from signaling.errors import CallNotFoundError
from signaling.sessions import CallSession

if TYPE_CHECKING:  # pragma: no cover
    from db.repository import CallHistoryRepository

LOGGER = logging.getLogger(__name__)


class CallHistoryRecorder:
    """Writes call start/end records without ever failing the caller.

    Writes are serialized so an end record cannot overtake the start record of
    the same call.
    """

    def __init__(self, repository: CallHistoryRepository | None = None, *, enabled: bool = True) -> None:
        self._repository = repository
        self._enabled = enabled
        self._lock = asyncio.Lock()

    def _get_repository(self) -> CallHistoryRepository:
        if self._repository is None:
            # Lazy import so the signaling engine can be used without a database engine.
            from db.repository import CallHistoryRepository

            self._repository = CallHistoryRepository()
        return self._repository

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def call_started(self, session: CallSession) -> None:
        if not self._enabled:
            return
        async with self._lock:
            try:
                await self._get_repository().start_call(
                    session.call_id,
                    initiator_id=session.caller_id,
                    participant_id=session.target_user_id,
                    call_type=session.call_type,
                    start_time=session.start_time,
                )
            except Exception as exc:
                LOGGER.exception("Recording start of call %s failed: %s", session.call_id, exc)

    async def call_ended(self, session: CallSession) -> None:
        if not self._enabled:
            return
        async with self._lock:
            try:
                await self._get_repository().end_call(session.call_id, end_time=session.end_time)
            except CallNotFoundError:
                LOGGER.warning("No history record for ended call %s", session.call_id)
            except Exception as exc:
                LOGGER.exception("Recording end of call %s failed: %s", session.call_id, exc)
