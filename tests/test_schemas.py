from __future__ import annotations

import json

import pytest

from signaling.errors import MalformedMessageError
from signaling.schemas import IceCandidate, InitiateCall, RegisterUser, parse_signal_frame


def _frame(event: str, **data) -> str:
    return json.dumps({"event": event, "data": data})


def test_parse_register_user_reads_camel_case_fields():
    message = parse_signal_frame(_frame("register-user", userId="a", userName="Alice"))

    assert isinstance(message, RegisterUser)
    assert message.user_id == "a"
    assert message.user_name == "Alice"


def test_parse_initiate_call_defaults_call_type():
    message = parse_signal_frame(
        _frame("initiate-call", callerId="a", targetUserId="b", offer={"type": "offer", "sdp": "v=0"})
    )

    assert isinstance(message, InitiateCall)
    assert message.call_type == "VIDEO"
    assert message.caller_name is None


def test_parse_ice_candidate_keeps_sdp_fields():
    message = parse_signal_frame(
        _frame("ice-candidate", targetUserId="b", candidate={"candidate": "c", "sdpMLineIndex": 1, "sdpMid": "audio"})
    )

    assert isinstance(message, IceCandidate)
    assert message.candidate.sdp_m_line_index == 1
    assert message.candidate.sdp_mid == "audio"


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[1, 2]",
        json.dumps({"event": "launch-rockets", "data": {}}),
        json.dumps({"data": {"userId": "a"}}),
        _frame("register-user", userName="no id"),
        _frame("initiate-call", callerId="a", targetUserId="b"),
        _frame("initiate-call", callerId="a", targetUserId="b", offer={}, callType="HOLOGRAM"),
    ],
)
def test_malformed_frames_raise(text: str):
    with pytest.raises(MalformedMessageError):
        parse_signal_frame(text)


def test_user_ids_longer_than_history_columns_are_rejected():
    with pytest.raises(MalformedMessageError):
        parse_signal_frame(_frame("register-user", userId="u" * 129))
    with pytest.raises(MalformedMessageError):
        parse_signal_frame(_frame("initiate-call", callerId="a", targetUserId="t" * 129, offer={}))
