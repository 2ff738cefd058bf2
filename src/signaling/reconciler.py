"""Presence and call cleanup when a connection drops."""

from __future__ import annotations

import logging

from signaling.messages import Transition
from signaling.schemas import CALL_ENDED
from signaling.state import SignalingState

LOGGER = logging.getLogger(__name__)


class DisconnectReconciler:
    def __init__(self, state: SignalingState) -> None:
        self._state = state

    def on_disconnect(self, connection_id: str) -> Transition:
        """Tear down whatever the dropped connection left behind.

        Every lookup may come back empty (never registered, already replaced by a
        newer registration, session already gone, counterparty already gone); each
        such step is skipped.
        """

        user = self._state.registry.user_for_connection(connection_id)
        if user is None:
            return Transition()
        return self.drop_user(user.user_id)

    def drop_user(self, user_id: str) -> Transition:
        user = self._state.registry.lookup(user_id)
        if user is None:
            return Transition()

        transition = self.end_current_call(user_id, reason="disconnect")
        self._state.registry.remove(user_id)
        LOGGER.info("User %s left (connection %s)", user_id, user.connection_id)
        return transition

    def end_current_call(self, user_id: str, *, reason: str) -> Transition:
        """End the call the user currently points at and notify the other party."""

        transition = Transition()
        user = self._state.registry.lookup(user_id)
        session = self._state.sessions.get(user.current_call_id) if user else None
        if session is None:
            return transition

        counterparty_id = session.counterparty(user_id)
        ended = self._state.end_call(session.call_id)
        if ended is None:
            return transition
        transition.ended.append(ended)

        counterparty = self._state.registry.lookup(counterparty_id) if counterparty_id else None
        if counterparty is not None and counterparty.user_id != user_id:
            transition.send(counterparty.connection_id, CALL_ENDED, userId=user_id)
        LOGGER.info("Call %s ended by %s of %s", ended.call_id, reason, user_id)
        return transition
