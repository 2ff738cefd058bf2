"""FastAPI routes for call history and service health."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies import get_call_repository, get_hub
from api.schemas import CallHistoryResponse, EndCallRequest, HealthResponse, StartCallRequest
from db.repository import CallHistoryRepository
from signaling.errors import SignalingError
from signaling.hub import ConnectionHub

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/call/start",
    response_model=CallHistoryResponse,
    status_code=201,
)
async def start_call(
    payload: StartCallRequest,
    repo: CallHistoryRepository = Depends(get_call_repository),
) -> CallHistoryResponse:
    try:
        call = await repo.start_call(
            uuid.uuid4().hex,
            initiator_id=payload.initiator_id,
            participant_id=payload.participant_id,
            call_type=payload.call_type,
        )
    except SQLAlchemyError as exc:
        LOGGER.exception("Storing call start failed: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    return CallHistoryResponse.model_validate(call)


@router.post(
    "/call/end",
    response_model=CallHistoryResponse,
)
async def end_call(
    payload: EndCallRequest,
    repo: CallHistoryRepository = Depends(get_call_repository),
) -> CallHistoryResponse:
    try:
        call = await repo.end_call(payload.call_id)
    except SignalingError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    except SQLAlchemyError as exc:
        LOGGER.exception("Storing call end failed: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    return CallHistoryResponse.model_validate(call)


@router.get(
    "/call/history/{user_id}",
    response_model=list[CallHistoryResponse],
)
async def list_call_history(
    user_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    repo: CallHistoryRepository = Depends(get_call_repository),
) -> list[CallHistoryResponse]:
    try:
        calls = await repo.list_calls_for_user(user_id, limit=limit)
    except SQLAlchemyError as exc:
        LOGGER.exception("Loading call history failed: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    return [CallHistoryResponse.model_validate(call) for call in calls]


@router.get("/health", response_model=HealthResponse)
async def health(hub: ConnectionHub = Depends(get_hub)) -> HealthResponse:
    return HealthResponse(
        connected_users=len(hub.state.registry),
        active_calls=len(hub.state.sessions),
    )
