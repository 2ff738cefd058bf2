"""Process-wide signaling state owner."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from signaling.registry import ConnectionRegistry
from signaling.sessions import CallSession, CallSessionStore, CallType

LOGGER = logging.getLogger(__name__)


class SignalingState:
    """Owns the connection registry and the call session store.

    One instance per server process, created empty at startup and cleared on
    shutdown. The paired mutations below keep `ConnectedUser.current_call_id`
    and `CallSession.call_id` consistent; none of them awaits, so on a single
    event loop each one is atomic.
    """

    def __init__(self) -> None:
        self.registry = ConnectionRegistry()
        self.sessions = CallSessionStore()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self.registry.clear()
        self.sessions.clear()
        self._running = True

    def stop(self) -> None:
        if self.sessions:
            LOGGER.info("Dropping %d live call session(s) on shutdown", len(self.sessions))
        self.registry.clear()
        self.sessions.clear()
        self._running = False

    def begin_call(
        self,
        caller_id: str,
        target_user_id: str,
        call_type: CallType = "VIDEO",
    ) -> CallSession:
        session = self.sessions.create(caller_id, target_user_id, call_type)
        for user_id in session.participants:
            user = self.registry.lookup(user_id)
            if user is None:
                continue
            user.is_available = False
            user.current_call_id = session.call_id
        return session

    def end_call(self, call_id: str) -> CallSession | None:
        """Remove the session and release both participants. No-op if absent."""

        session = self.sessions.remove(call_id)
        if session is None:
            return None

        session.status = "ended"
        session.end_time = datetime.now(timezone.utc)
        for user_id in session.participants:
            self.release(user_id, call_id)
        return session

    def release(self, user_id: str, call_id: str | None = None) -> None:
        """Mark a user available again.

        When `call_id` is given, the user is only touched if it still points at
        that call.
        """

        user = self.registry.lookup(user_id)
        if user is None:
            return
        if call_id is not None and user.current_call_id not in (None, call_id):
            return
        user.is_available = True
        user.current_call_id = None

    def shared_session(self, first: str | None, second: str) -> CallSession | None:
        """Return the session whose participants are exactly `first` and `second`."""

        if first is None:
            return None
        for user_id in (first, second):
            user = self.registry.lookup(user_id)
            if user is None:
                continue
            session = self.sessions.get(user.current_call_id)
            if session is not None and session.involves(first, second):
                return session
        return None
