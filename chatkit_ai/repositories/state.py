"""
Conversation State Persistence

One record per conversation id, stored under a key derived from that id and
expiring after a TTL. The service layer loads the state before a run and saves
it once afterwards; agents and the workflow only touch the in-memory object.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session

from ..infrastructure.database.tables import ConversationStateDBModel
from ..state.models import ConversationState

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


def state_key(conversation_id: str) -> str:
    return f"chatkit_state_{conversation_id}"


def _utcnow_naive() -> datetime:
    # Stored columns are naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StateRepository(ABC):
    """
    Defines how the application loads and saves conversation state.
    This allows us change the store (Memory -> SQL -> Redis) later
    without changing the Workflow or ChatService code.
    """

    @abstractmethod
    def load(self, conversation_id: str) -> Optional[ConversationState]:
        """Returns the stored state, or None if absent or expired."""
        pass

    @abstractmethod
    def save(self, state: ConversationState, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        """Persists the state; it expires 'ttl_seconds' from now."""
        pass

    @abstractmethod
    def delete(self, conversation_id: str) -> bool:
        """Deletes a state. Returns True if found and deleted."""
        pass

    def load_or_create(self, conversation_id: str) -> ConversationState:
        existing = self.load(conversation_id)
        if existing is not None:
            return existing
        return ConversationState(conversation_id=conversation_id)


class InMemoryStateRepository(StateRepository):
    """
    Uses in-memory dictionary for state storage for testing/dev purposes.
    Records are stored serialized so loads never alias a live object.
    """

    def __init__(self):
        self._store: Dict[str, Tuple[Dict[str, Any], float]] = {}

    def load(self, conversation_id: str) -> Optional[ConversationState]:
        key = state_key(conversation_id)
        entry = self._store.get(key)
        if entry is None:
            return None

        payload, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._store[key]
            return None
        return ConversationState.from_dict(payload)

    def save(self, state: ConversationState, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        now = time.monotonic()
        self._evict_expired(now)
        self._store[state_key(state.conversation_id)] = (state.to_dict(), now + ttl_seconds)

    def _evict_expired(self, now: float) -> None:
        # Covers abandoned conversations, which are never loaded again
        expired = [key for key, (_, expires_at) in self._store.items() if now >= expires_at]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired conversation states")

    def delete(self, conversation_id: str) -> bool:
        return self._store.pop(state_key(conversation_id), None) is not None


class SQLStateRepository(StateRepository):
    """
    SQL storage (JSONB on PostgreSQL) for conversation state.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def load(self, conversation_id: str) -> Optional[ConversationState]:
        with Session(self.engine) as db:
            result = db.get(ConversationStateDBModel, state_key(conversation_id))
            if not result:
                return None

            if result.expires_at <= _utcnow_naive():
                db.delete(result)
                db.commit()
                logger.debug(f"State for conversation {conversation_id} expired")
                return None

            # Deserialize JSON back into the Pydantic model
            return ConversationState.from_dict(result.state)

    def save(self, state: ConversationState, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        now = _utcnow_naive()
        key = state_key(state.conversation_id)

        with Session(self.engine) as db:
            result = db.get(ConversationStateDBModel, key)
            if result is None:
                result = ConversationStateDBModel(
                    state_key=key,
                    conversation_id=state.conversation_id,
                    state=state.to_dict(),
                    expires_at=now + timedelta(seconds=ttl_seconds),
                )
            else:
                result.state = state.to_dict()
                result.updated_at = now
                result.expires_at = now + timedelta(seconds=ttl_seconds)
            db.add(result)
            db.commit()

    def delete(self, conversation_id: str) -> bool:
        with Session(self.engine) as db:
            result = db.get(ConversationStateDBModel, state_key(conversation_id))
            if result:
                db.delete(result)
                db.commit()
                return True
            return False
