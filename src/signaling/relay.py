"""Call-setup protocol: one synchronous transition per inbound message kind.

Transitions mutate the shared `SignalingState` and return the frames to send;
they never touch a socket, so the protocol can be exercised without a transport.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from signaling.errors import SignalingError, UserBusyError, UserNotFoundError
from signaling.messages import Transition
from signaling.reconciler import DisconnectReconciler
from signaling.registry import ConnectedUser
from signaling.schemas import (
    CALL_ACCEPTED,
    CALL_CANCELLED,
    CALL_ENDED,
    CALL_ERROR,
    CALL_REJECTED,
    ICE_CANDIDATE,
    INCOMING_CALL,
    USER_AVAILABILITY_RESPONSE,
    USER_REGISTERED,
    AcceptCall,
    CancelCall,
    CheckUserAvailability,
    EndCall,
    IceCandidate,
    InitiateCall,
    RegisterUser,
    RejectCall,
    SignalMessage,
)
from signaling.state import SignalingState

LOGGER = logging.getLogger(__name__)


class SignalRelay:
    """Applies signaling messages to the presence registry and call sessions.

    Only `initiate-call` validates the addressed peer. Every other message is
    forwarded if the peer is connected and silently dropped otherwise: a missed
    notification is preferable to failing the sender's connection.
    """

    def __init__(self, state: SignalingState, reconciler: DisconnectReconciler | None = None) -> None:
        self._state = state
        self._reconciler = reconciler or DisconnectReconciler(state)
        self._handlers: dict[type[SignalMessage], Callable[[str, SignalMessage], Transition]] = {
            RegisterUser: self.register_user,
            CheckUserAvailability: self.check_availability,
            InitiateCall: self.initiate_call,
            AcceptCall: self.accept_call,
            RejectCall: self.reject_call,
            EndCall: self.end_call,
            CancelCall: self.cancel_call,
            IceCandidate: self.ice_candidate,
        }

    def handle(self, connection_id: str, message: SignalMessage) -> Transition:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise TypeError(f"No handler for {type(message).__name__}")
        return handler(connection_id, message)

    def _sender(self, connection_id: str) -> ConnectedUser | None:
        return self._state.registry.user_for_connection(connection_id)

    def register_user(self, connection_id: str, message: RegisterUser) -> Transition:
        transition = Transition()

        # A connection speaks for one user at a time.
        previous = self._sender(connection_id)
        if previous is not None and previous.user_id != message.user_id:
            transition.extend(self._reconciler.drop_user(previous.user_id))

        replaced = self._state.registry.lookup(message.user_id)
        if replaced is not None:
            if replaced.connection_id != connection_id:
                LOGGER.info(
                    "User %s re-registered, replacing connection %s",
                    message.user_id,
                    replaced.connection_id,
                )
            # Registration resets presence, so a call still held by the old entry ends here.
            transition.extend(self._reconciler.end_current_call(message.user_id, reason="re-registration"))

        user = self._state.registry.register(message.user_id, message.user_name, connection_id)
        LOGGER.info("User %s registered on connection %s", user.user_id, connection_id)
        transition.send(
            connection_id,
            USER_REGISTERED,
            userId=user.user_id,
            connectionId=connection_id,
            success=True,
        )
        return transition

    def check_availability(self, connection_id: str, message: CheckUserAvailability) -> Transition:
        target = self._state.registry.lookup(message.target_user_id)
        transition = Transition()
        transition.send(
            connection_id,
            USER_AVAILABILITY_RESPONSE,
            targetUserId=message.target_user_id,
            isAvailable=bool(target and target.is_available),
        )
        return transition

    def initiate_call(self, connection_id: str, message: InitiateCall) -> Transition:
        transition = Transition()
        try:
            target = self._state.registry.lookup(message.target_user_id)
            if target is None:
                raise UserNotFoundError()
            if not target.is_available:
                raise UserBusyError()
        except SignalingError as exc:
            LOGGER.info(
                "Call from %s to %s refused: %s",
                message.caller_id,
                message.target_user_id,
                exc.detail,
            )
            transition.send(connection_id, CALL_ERROR, message=exc.detail)
            return transition

        # One call per caller: a call it still holds is hung up first.
        transition.extend(self._reconciler.end_current_call(message.caller_id, reason="new call"))

        session = self._state.begin_call(message.caller_id, message.target_user_id, message.call_type)
        transition.started.append(session)
        transition.send(
            target.connection_id,
            INCOMING_CALL,
            callId=session.call_id,
            callerId=message.caller_id,
            callerName=message.caller_name,
            offer=message.offer,
            callType=session.call_type,
        )
        LOGGER.info("Call %s pending: %s -> %s", session.call_id, message.caller_id, message.target_user_id)
        return transition

    def accept_call(self, connection_id: str, message: AcceptCall) -> Transition:
        transition = Transition()
        caller = self._state.registry.lookup(message.target_user_id)
        if caller is None:
            LOGGER.debug("Dropping call-accepted for absent user %s", message.target_user_id)
            return transition

        sender = self._sender(connection_id)
        sender_id = sender.user_id if sender else None
        session = self._state.shared_session(sender_id, caller.user_id)
        if session is not None and session.status == "pending":
            session.status = "active"
            LOGGER.info("Call %s active", session.call_id)

        transition.send(caller.connection_id, CALL_ACCEPTED, answer=message.answer, userId=sender_id)
        return transition

    def reject_call(self, connection_id: str, message: RejectCall) -> Transition:
        return self._hang_up(connection_id, message.target_user_id, CALL_REJECTED)

    def end_call(self, connection_id: str, message: EndCall) -> Transition:
        return self._hang_up(connection_id, message.target_user_id, CALL_ENDED)

    def cancel_call(self, connection_id: str, message: CancelCall) -> Transition:
        return self._hang_up(connection_id, message.target_user_id, CALL_CANCELLED)

    def ice_candidate(self, connection_id: str, message: IceCandidate) -> Transition:
        transition = Transition()
        target = self._state.registry.lookup(message.target_user_id)
        if target is None:
            LOGGER.debug("Dropping ice-candidate for absent user %s", message.target_user_id)
            return transition

        sender = self._sender(connection_id)
        transition.send(
            target.connection_id,
            ICE_CANDIDATE,
            candidate=message.candidate.model_dump(by_alias=True),
            userId=sender.user_id if sender else None,
        )
        return transition

    def _hang_up(self, connection_id: str, peer_id: str, event: str) -> Transition:
        transition = Transition()
        sender = self._sender(connection_id)
        sender_id = sender.user_id if sender else None

        session = self._state.shared_session(sender_id, peer_id)
        if session is None:
            LOGGER.debug("No call between %s and %s; dropping %s", sender_id, peer_id, event)
            return transition

        ended = self._state.end_call(session.call_id)
        if ended is None:
            return transition
        transition.ended.append(ended)
        LOGGER.info("Call %s ended by %s (%s)", ended.call_id, sender_id, event)

        peer = self._state.registry.lookup(peer_id)
        if peer is not None:
            transition.send(peer.connection_id, event, userId=sender_id)
        return transition
