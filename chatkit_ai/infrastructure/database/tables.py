"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic state model (ConversationState).
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def _utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ConversationStateDBModel(SQLModel, table=True):
    """
    Persistence model for conversation state.
    Maps 1-to-1 with the 'conversation_states' table.
    """

    __tablename__ = "conversation_states"

    # Derived from the conversation id ("chatkit_state_<id>").
    state_key: str = Field(primary_key=True)
    conversation_id: str = Field(index=True)

    # The entire ConversationState (messages, data, trace, metadata) as one JSON
    # document. JSONB on PostgreSQL, plain JSON elsewhere.
    state: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    )

    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=_utcnow_naive)
    updated_at: datetime = Field(default_factory=_utcnow_naive)
