"""
State Layer - Runtime Data Models

Defines the per-conversation state that agents read and mutate and that the
workflow appends trace entries to.
"""

from chatkit_ai.state.models import (
    ConversationState,
    Message,
    TraceEntry,
)

__all__ = [
    "ConversationState",
    "Message",
    "TraceEntry",
]
