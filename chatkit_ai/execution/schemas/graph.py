"""
Graph Types - Workflow Node Actions and Edges

Tagged variants for what a node does and how the next node is chosen. The
Workflow dispatches on these with a match statement instead of inspecting
raw strings and callables at run time.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

from ...state.models import ConversationState

# Reserved terminal marker.
END = "END"


@dataclass(frozen=True)
class AgentRef:
    """Node backed by a registered agent, resolved through the Registry."""
    agent_name: str


@dataclass(frozen=True)
class InlineStep:
    """Node backed by a callable(state). It may be sync or async."""
    func: Callable[[ConversationState], Any]


NodeAction = Union[AgentRef, InlineStep]


@dataclass(frozen=True)
class FixedEdge:
    target: str


@dataclass(frozen=True)
class ConditionalEdge:
    """Routing function: state -> next node name."""
    router: Callable[[ConversationState], str]


Edge = Union[FixedEdge, ConditionalEdge]
