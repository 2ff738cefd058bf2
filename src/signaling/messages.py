from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from signaling.sessions import CallSession


@dataclass(frozen=True, slots=True)
class Outbound:
    """A frame addressed to one live connection."""

    connection_id: str
    event: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_frame(self) -> dict[str, Any]:
        return {"event": self.event, "data": self.data}


@dataclass(slots=True)
class Transition:
    """Result of applying one inbound message or disconnect to the signaling state."""

    messages: list[Outbound] = field(default_factory=list)
    started: list[CallSession] = field(default_factory=list)
    ended: list[CallSession] = field(default_factory=list)

    def send(self, connection_id: str, event: str, **data: Any) -> None:
        self.messages.append(Outbound(connection_id=connection_id, event=event, data=data))

    def extend(self, other: Transition) -> None:
        self.messages.extend(other.messages)
        self.started.extend(other.started)
        self.ended.extend(other.ended)
