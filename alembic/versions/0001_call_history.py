"""call history

Revision ID: 0001_call_history
Revises: 
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_call_history"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "call_history",
        sa.Column("id", sa.String(length=320), primary_key=True, nullable=False),
        sa.Column("initiator_id", sa.String(length=128), nullable=False),
        sa.Column("participant_id", sa.String(length=128), nullable=False),
        sa.Column("call_type", sa.String(length=16), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_call_history_initiator_id", "call_history", ["initiator_id"])
    op.create_index("ix_call_history_participant_id", "call_history", ["participant_id"])


def downgrade() -> None:
    op.drop_index("ix_call_history_participant_id", table_name="call_history")
    op.drop_index("ix_call_history_initiator_id", table_name="call_history")
    op.drop_table("call_history")
