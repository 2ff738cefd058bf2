"""Binds live WebSocket connections to the signal relay."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Coroutine
from typing import Any

from fastapi import WebSocket

from signaling.errors import MalformedMessageError
from signaling.history import CallHistoryRecorder
from signaling.messages import Outbound, Transition
from signaling.reconciler import DisconnectReconciler
from signaling.relay import SignalRelay
from signaling.schemas import ERROR, parse_signal_frame
from signaling.state import SignalingState

LOGGER = logging.getLogger(__name__)


class ConnectionHub:
    """Owns the open sockets and feeds their frames through the relay.

    Transport code only talks to the hub; the registry and session store are
    touched exclusively by the relay and the reconciler, inside `_lock`.
    """

    def __init__(self, state: SignalingState, recorder: CallHistoryRecorder | None = None) -> None:
        self.state = state
        self._recorder = recorder or CallHistoryRecorder(enabled=False)
        self._reconciler = DisconnectReconciler(state)
        self._relay = SignalRelay(state, self._reconciler)
        self._sockets: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()

    @property
    def connection_count(self) -> int:
        return len(self._sockets)

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = websocket
        LOGGER.info("New client connected: %s", connection_id)
        return connection_id

    async def dispatch(self, connection_id: str, text: str) -> None:
        try:
            message = parse_signal_frame(text)
        except MalformedMessageError as exc:
            await self.reject(connection_id, exc.detail)
            return

        try:
            async with self._lock:
                transition = self._relay.handle(connection_id, message)
        except Exception as exc:
            LOGGER.exception("Handling %s from %s failed: %s", type(message).__name__, connection_id, exc)
            await self.send(Outbound(connection_id, ERROR, {"message": "Internal error"}))
            return
        await self._apply(transition)

    async def reject(self, connection_id: str, detail: str) -> None:
        """Answer an unusable frame with an error; the connection stays open."""

        LOGGER.warning("Rejected frame from %s: %s", connection_id, detail)
        await self.send(Outbound(connection_id, ERROR, {"message": detail}))

    async def disconnect(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)
        async with self._lock:
            transition = self._reconciler.on_disconnect(connection_id)
        LOGGER.info("Client disconnected: %s", connection_id)
        await self._apply(transition)

    async def send(self, outbound: Outbound) -> None:
        websocket = self._sockets.get(outbound.connection_id)
        if websocket is None:
            LOGGER.debug("Connection %s gone; dropping %s", outbound.connection_id, outbound.event)
            return
        try:
            await websocket.send_json(outbound.to_frame())
        except Exception as exc:
            LOGGER.warning(
                "Sending %s to %s failed: %s", outbound.event, outbound.connection_id, exc
            )

    async def close(self) -> None:
        for connection_id, websocket in list(self._sockets.items()):
            try:
                await websocket.close()
            except Exception as exc:
                LOGGER.debug("Closing %s failed: %s", connection_id, exc)
        self._sockets.clear()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self.state.stop()

    async def _apply(self, transition: Transition) -> None:
        for session in transition.started:
            self._schedule(self._recorder.call_started(session))
        for session in transition.ended:
            self._schedule(self._recorder.call_ended(session))
        for outbound in transition.messages:
            await self.send(outbound)

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
