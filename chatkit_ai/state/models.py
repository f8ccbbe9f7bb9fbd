"""
State Layer - Runtime Data Models

This module defines the mutable per-conversation record threaded through a
workflow run: the message log, data extracted by agents, the execution trace
and run bookkeeping. It is serialized as one record per conversation id.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MessageRole = Literal["user", "assistant", "system"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    role: MessageRole
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)


class TraceEntry(BaseModel):
    """
    One node execution. 'agent' is the agent name for agent nodes and the
    node name for inline steps.
    """
    agent: str
    node: str
    timestamp: datetime = Field(default_factory=utcnow)
    latency_ms: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConversationState(BaseModel):
    """
    The global state for a single conversation.

    'messages' is append-only across turns. 'trace' is append-only during a
    run and only holds the latest run. 'data' and
    'metadata' are free-form and JSON-serializable.
    """
    conversation_id: str = Field(frozen=True)
    messages: List[Message] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)
    trace: List[TraceEntry] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    # --- data ---

    def set(self, key: str, value: Any) -> "ConversationState":
        self.data[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key)
        return default if value is None else value

    def has(self, key: str) -> bool:
        return self.data.get(key) is not None

    def remove(self, key: str) -> "ConversationState":
        self.data.pop(key, None)
        return self

    def get_data(self) -> Dict[str, Any]:
        return self.data

    # --- messages ---

    def add_message(
        self, role: MessageRole, content: str, metadata: Optional[Dict[str, Any]] = None
    ) -> "ConversationState":
        self.messages.append(Message(role=role, content=content, metadata=metadata or {}))
        return self

    def get_messages(self, include_metadata: bool = False) -> List[dict]:
        """Messages as plain dicts; role/content only unless metadata is requested."""
        if include_metadata:
            return [msg.model_dump(mode="json") for msg in self.messages]
        return [{"role": msg.role, "content": msg.content} for msg in self.messages]

    def get_last_user_message(self) -> str:
        return self._last_content("user")

    def get_last_assistant_message(self) -> str:
        return self._last_content("assistant")

    def _last_content(self, role: MessageRole) -> str:
        for msg in reversed(self.messages):
            if msg.role == role:
                return msg.content
        return ""

    # --- trace ---

    def add_trace(
        self,
        agent: str,
        node: str,
        latency_ms: float = 0.0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ConversationState":
        self.trace.append(
            TraceEntry(agent=agent, node=node, latency_ms=latency_ms, metadata=metadata or {})
        )
        return self

    def reset_trace(self) -> "ConversationState":
        """The trace covers one run; the workflow resets it before starting."""
        self.trace.clear()
        return self

    def get_trace(self) -> List[TraceEntry]:
        return self.trace

    def get_agent_names(self) -> List[str]:
        return [entry.agent for entry in self.trace]

    # --- metadata ---

    def set_metadata(self, key: str, value: Any) -> "ConversationState":
        self.metadata[key] = value
        return self

    def get_metadata(self, key: Optional[str] = None) -> Any:
        if key is None:
            return self.metadata
        return self.metadata.get(key)

    # --- serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ConversationState":
        return cls.model_validate(payload)
