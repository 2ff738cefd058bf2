"""Live presence registry: user id -> connection handle and availability."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(slots=True)
class ConnectedUser:
    user_id: str
    connection_id: str
    display_name: str | None = None
    is_available: bool = True
    current_call_id: str | None = None


class ConnectionRegistry:
    """In-memory registry of connected users.

    Holds at most one entry per user id. A later registration under the same
    user id replaces the earlier entry (last writer wins) and the replaced
    connection handle stops resolving to the user.

    Note: This is a single-process store. Presence is not shared between
    server processes.
    """

    def __init__(self) -> None:
        self._users: dict[str, ConnectedUser] = {}
        self._by_connection: dict[str, str] = {}

    def register(
        self,
        user_id: str,
        display_name: str | None,
        connection_id: str,
    ) -> ConnectedUser:
        previous = self._users.get(user_id)
        if previous is not None:
            self._by_connection.pop(previous.connection_id, None)

        user = ConnectedUser(
            user_id=user_id,
            connection_id=connection_id,
            display_name=display_name,
        )
        self._users[user_id] = user
        self._by_connection[connection_id] = user_id
        return user

    def lookup(self, user_id: str) -> ConnectedUser | None:
        return self._users.get(user_id)

    def user_for_connection(self, connection_id: str) -> ConnectedUser | None:
        user_id = self._by_connection.get(connection_id)
        if user_id is None:
            return None
        return self._users.get(user_id)

    def remove(self, user_id: str) -> ConnectedUser | None:
        user = self._users.pop(user_id, None)
        if user is not None and self._by_connection.get(user.connection_id) == user_id:
            del self._by_connection[user.connection_id]
        return user

    def set_availability(self, user_id: str, available: bool) -> None:
        user = self._users.get(user_id)
        if user is None:
            return
        user.is_available = available

    def clear(self) -> None:
        self._users.clear()
        self._by_connection.clear()

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __iter__(self) -> Iterator[ConnectedUser]:
        return iter(list(self._users.values()))
