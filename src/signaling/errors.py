"""Domain-specific exceptions for signaling and call history.

These exceptions are safe to import from API layers without pulling in the database engine.
"""

from __future__ import annotations


class SignalingError(Exception):
    status_code: int = 500
    default_detail: str = "Signaling error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class UserNotFoundError(SignalingError):
    status_code = 404
    default_detail = "User not found"


class UserBusyError(SignalingError):
    status_code = 409
    default_detail = "User is busy"


class MalformedMessageError(SignalingError):
    status_code = 400
    default_detail = "Malformed message"


class CallNotFoundError(SignalingError):
    status_code = 404
    default_detail = "Call not found"
