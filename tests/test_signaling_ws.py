from __future__ import annotations

from fastapi.testclient import TestClient

OFFER = {"type": "offer", "sdp": "v=0 offer"}
ANSWER = {"type": "answer", "sdp": "v=0 answer"}


def _send(ws, event: str, **data) -> None:
    ws.send_json({"event": event, "data": data})


def _register(ws, user_id: str) -> dict:
    _send(ws, "register-user", userId=user_id, userName=user_id.upper())
    reply = ws.receive_json()
    assert reply["event"] == "user-registered"
    return reply["data"]


def _is_available(ws, target_user_id: str) -> bool:
    _send(ws, "check-user-availability", targetUserId=target_user_id)
    reply = ws.receive_json()
    assert reply["event"] == "user-availability-response"
    return reply["data"]["isAvailable"]


def test_register_returns_connection_id(client):
    with client.websocket_connect("/ws") as ws:
        ack = _register(ws, "ws-solo")

    assert ack["userId"] == "ws-solo"
    assert ack["success"] is True
    assert ack["connectionId"]


def test_full_call_over_websocket(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        _register(a, "ws-a")
        _register(b, "ws-b")
        assert _is_available(a, "ws-b") is True

        _send(a, "initiate-call", callerId="ws-a", callerName="A", targetUserId="ws-b", offer=OFFER)
        incoming = b.receive_json()
        assert incoming["event"] == "incoming-call"
        assert incoming["data"]["callerId"] == "ws-a"
        assert incoming["data"]["offer"] == OFFER
        assert _is_available(a, "ws-b") is False

        _send(b, "call-accepted", targetUserId="ws-a", answer=ANSWER)
        accepted = a.receive_json()
        assert accepted["event"] == "call-accepted"
        assert accepted["data"]["answer"] == ANSWER

        _send(b, "ice-candidate", targetUserId="ws-a", candidate={"candidate": "candidate:1", "sdpMid": "0"})
        ice = a.receive_json()
        assert ice["event"] == "ice-candidate"
        assert ice["data"]["userId"] == "ws-b"
        assert ice["data"]["candidate"]["candidate"] == "candidate:1"

        health = client.get("/api/health").json()
        assert health["activeCalls"] == 1

        _send(a, "call-ended", targetUserId="ws-b")
        ended = b.receive_json()
        assert ended["event"] == "call-ended"

        assert _is_available(a, "ws-b") is True
        assert _is_available(b, "ws-a") is True
        assert client.get("/api/health").json()["activeCalls"] == 0


def test_busy_target_yields_call_error(client):
    with (
        client.websocket_connect("/ws") as a,
        client.websocket_connect("/ws") as b,
        client.websocket_connect("/ws") as c,
    ):
        _register(a, "busy-a")
        _register(b, "busy-b")
        _register(c, "busy-c")

        _send(a, "initiate-call", callerId="busy-a", targetUserId="busy-b", offer=OFFER)
        assert b.receive_json()["event"] == "incoming-call"

        _send(c, "initiate-call", callerId="busy-c", targetUserId="busy-b", offer=OFFER)
        error = c.receive_json()
        assert error == {"event": "call-error", "data": {"message": "User is busy"}}

        _send(c, "initiate-call", callerId="busy-c", targetUserId="nobody", offer=OFFER)
        error = c.receive_json()
        assert error == {"event": "call-error", "data": {"message": "User not found"}}


def test_caller_drop_before_answer_notifies_target(client):
    with client.websocket_connect("/ws") as b:
        _register(b, "drop-b")

        with client.websocket_connect("/ws") as a:
            _register(a, "drop-a")
            _send(a, "initiate-call", callerId="drop-a", targetUserId="drop-b", offer=OFFER)
            assert b.receive_json()["event"] == "incoming-call"

        ended = b.receive_json()
        assert ended == {"event": "call-ended", "data": {"userId": "drop-a"}}
        assert _is_available(b, "drop-b") is True
        assert _is_available(b, "drop-a") is False


def test_malformed_frames_keep_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{not json")
        assert ws.receive_json()["event"] == "error"

        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"event": "error", "data": {"message": "Binary frames are not supported"}}

        _send(ws, "teleport", targetUserId="x")
        error = ws.receive_json()
        assert error["event"] == "error"
        assert "Unknown event" in error["data"]["message"]

        assert _register(ws, "still-here")["userId"] == "still-here"


def test_signaled_calls_are_recorded_in_history(app):
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            _register(a, "hist-a")
            _register(b, "hist-b")
            _send(a, "initiate-call", callerId="hist-a", targetUserId="hist-b", offer=OFFER, callType="AUDIO")
            assert b.receive_json()["event"] == "incoming-call"
            _send(b, "call-rejected", targetUserId="hist-a")
            assert a.receive_json()["event"] == "call-rejected"

    # Shutdown waits for pending history writes.
    with TestClient(app) as client:
        history = client.get("/api/call/history/hist-b").json()

    assert len(history) == 1
    assert history[0]["initiatorId"] == "hist-a"
    assert history[0]["participantId"] == "hist-b"
    assert history[0]["callType"] == "AUDIO"
    assert history[0]["endTime"] is not None
