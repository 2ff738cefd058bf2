"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi.requests import HTTPConnection

if TYPE_CHECKING:  # pragma: no cover
    from db.repository import CallHistoryRepository
    from signaling.hub import ConnectionHub


def get_hub(connection: HTTPConnection) -> ConnectionHub:
    # Created by the application lifespan; works for both HTTP and WebSocket routes.
    return connection.app.state.hub


@lru_cache(maxsize=1)
def _repository_factory() -> CallHistoryRepository:
    # Lazy import so route modules can be imported before the engine is configured.
    from db.repository import CallHistoryRepository

    return CallHistoryRepository()


def get_call_repository() -> CallHistoryRepository:
    return _repository_factory()
