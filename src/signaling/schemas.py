"""Pydantic schemas for signaling socket frames.

Every frame, in both directions, is a JSON object `{"event": <name>, "data": {...}}`
with camelCase field names inside `data`.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from signaling.errors import MalformedMessageError
from signaling.sessions import MAX_USER_ID_LENGTH, CallType

# Client -> server
REGISTER_USER = "register-user"
CHECK_USER_AVAILABILITY = "check-user-availability"
INITIATE_CALL = "initiate-call"
CALL_ACCEPTED = "call-accepted"
CALL_REJECTED = "call-rejected"
CALL_ENDED = "call-ended"
CANCEL_CALL = "cancel-call"
ICE_CANDIDATE = "ice-candidate"

# Server -> client
USER_REGISTERED = "user-registered"
USER_AVAILABILITY_RESPONSE = "user-availability-response"
INCOMING_CALL = "incoming-call"
CALL_ERROR = "call-error"
CALL_CANCELLED = "call-cancelled"
ERROR = "error"


class SignalMessage(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RegisterUser(SignalMessage):
    user_id: str = Field(min_length=1, max_length=MAX_USER_ID_LENGTH)
    user_name: str | None = None


class CheckUserAvailability(SignalMessage):
    target_user_id: str


class InitiateCall(SignalMessage):
    caller_id: str = Field(min_length=1, max_length=MAX_USER_ID_LENGTH)
    caller_name: str | None = None
    target_user_id: str = Field(min_length=1, max_length=MAX_USER_ID_LENGTH)
    offer: dict[str, Any]
    call_type: CallType = "VIDEO"


class AcceptCall(SignalMessage):
    target_user_id: str
    answer: dict[str, Any]


class RejectCall(SignalMessage):
    target_user_id: str


class EndCall(SignalMessage):
    target_user_id: str


class CancelCall(SignalMessage):
    target_user_id: str


class IceCandidatePayload(SignalMessage):
    candidate: str
    sdp_m_line_index: int | None = Field(default=None, alias="sdpMLineIndex")
    sdp_mid: str | None = None
    username_fragment: str | None = None


class IceCandidate(SignalMessage):
    target_user_id: str
    candidate: IceCandidatePayload


INBOUND_MODELS: dict[str, type[SignalMessage]] = {
    REGISTER_USER: RegisterUser,
    CHECK_USER_AVAILABILITY: CheckUserAvailability,
    INITIATE_CALL: InitiateCall,
    CALL_ACCEPTED: AcceptCall,
    CALL_REJECTED: RejectCall,
    CALL_ENDED: EndCall,
    CANCEL_CALL: CancelCall,
    ICE_CANDIDATE: IceCandidate,
}


def parse_signal_frame(text: str) -> SignalMessage:
    """Decode one socket frame into its typed message.

    Raises MalformedMessageError for invalid JSON, unknown events and payloads
    that fail validation.
    """

    try:
        frame = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedMessageError("Frame is not valid JSON") from exc

    if not isinstance(frame, dict):
        raise MalformedMessageError("Frame must be a JSON object")

    event = frame.get("event")
    model = INBOUND_MODELS.get(event) if isinstance(event, str) else None
    if model is None:
        raise MalformedMessageError(f"Unknown event: {event!r}")

    try:
        return model.model_validate(frame.get("data") or {})
    except ValidationError as exc:
        raise MalformedMessageError(f"Invalid payload for {event}") from exc
