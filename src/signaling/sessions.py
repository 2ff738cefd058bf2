"""Call session store keyed by call id."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

CallStatus = Literal["pending", "active", "ended"]
CallType = Literal["AUDIO", "VIDEO", "SCREEN_SHARE"]

# Matches the call_history id columns.
MAX_USER_ID_LENGTH = 128


@dataclass(slots=True)
class CallSession:
    call_id: str
    caller_id: str
    target_user_id: str
    status: CallStatus
    start_time: datetime
    call_type: CallType = "VIDEO"
    end_time: datetime | None = None

    @property
    def participants(self) -> tuple[str, str]:
        return (self.caller_id, self.target_user_id)

    def counterparty(self, user_id: str) -> str | None:
        if user_id == self.caller_id:
            return self.target_user_id
        if user_id == self.target_user_id:
            return self.caller_id
        return None

    def involves(self, first: str, second: str) -> bool:
        return {first, second} == {self.caller_id, self.target_user_id}


def generate_call_id(caller_id: str, target_user_id: str, now: datetime) -> str:
    millis = int(now.timestamp() * 1000)
    return f"{caller_id}-{target_user_id}-{millis}-{secrets.token_hex(4)}"


class CallSessionStore:
    """In-memory call sessions.

    Does not validate that the participants exist; callers are expected to
    check the registry first.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, CallSession] = {}

    def create(
        self,
        caller_id: str,
        target_user_id: str,
        call_type: CallType = "VIDEO",
    ) -> CallSession:
        now = datetime.now(timezone.utc)
        call_id = generate_call_id(caller_id, target_user_id, now)
        while call_id in self._sessions:
            call_id = generate_call_id(caller_id, target_user_id, now)

        session = CallSession(
            call_id=call_id,
            caller_id=caller_id,
            target_user_id=target_user_id,
            status="pending",
            start_time=now,
            call_type=call_type,
        )
        self._sessions[call_id] = session
        return session

    def get(self, call_id: str | None) -> CallSession | None:
        if call_id is None:
            return None
        return self._sessions.get(call_id)

    def remove(self, call_id: str) -> CallSession | None:
        return self._sessions.pop(call_id, None)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._sessions
