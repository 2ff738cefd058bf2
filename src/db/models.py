"""SQLAlchemy models for call history."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class CallHistory(Base):
    """One call between two users, from start to (optional) end."""

    __tablename__ = "call_history"

    id: Mapped[str] = mapped_column(String(320), primary_key=True)
    initiator_id: Mapped[str] = mapped_column(String(128), index=True)
    participant_id: Mapped[str] = mapped_column(String(128), index=True)
    call_type: Mapped[str] = mapped_column(String(16), default="VIDEO")
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
