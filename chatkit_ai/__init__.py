"""
ChatKit AI Backend

Agent orchestration for a website chat widget: user messages flow through a
workflow of agents (moderation, classification, composition) that share one
conversation state and call out to a language-model provider.
"""

from chatkit_ai.exceptions import (
    ChatKitError,
    ConfigurationError,
    ProviderError,
    WorkflowError,
)
from chatkit_ai.state import (
    ConversationState,
    Message,
    TraceEntry,
)
from chatkit_ai.domain import (
    AgentDefinition,
    WorkflowDefinition,
)
from chatkit_ai.llm.interface import Completion, LLMProvider, ModerationResult
from chatkit_ai.agents import (
    Agent,
    ClassifierAgent,
    ComposerAgent,
    GuardrailsAgent,
)
from chatkit_ai.execution import END, Registry, Workflow

__all__ = [
    # Errors
    "ChatKitError",
    "ConfigurationError",
    "ProviderError",
    "WorkflowError",
    # State Layer
    "ConversationState",
    "Message",
    "TraceEntry",
    # Domain Layer
    "AgentDefinition",
    "WorkflowDefinition",
    # Providers
    "Completion",
    "LLMProvider",
    "ModerationResult",
    # Agents
    "Agent",
    "ClassifierAgent",
    "ComposerAgent",
    "GuardrailsAgent",
    # Execution Layer
    "END",
    "Registry",
    "Workflow",
]
