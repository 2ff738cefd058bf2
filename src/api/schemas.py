"""API-facing Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StartCallRequest(CamelModel):
    initiator_id: str = Field(min_length=1, max_length=128)
    participant_id: str = Field(min_length=1, max_length=128)
    call_type: Literal["AUDIO", "VIDEO", "SCREEN_SHARE"]


class EndCallRequest(CamelModel):
    call_id: str = Field(min_length=1, max_length=320)


class CallHistoryResponse(CamelModel):
    id: str
    initiator_id: str
    participant_id: str
    call_type: str
    start_time: datetime
    end_time: datetime | None = None


class HealthResponse(CamelModel):
    status: str = "ok"
    connected_users: int
    active_calls: int
