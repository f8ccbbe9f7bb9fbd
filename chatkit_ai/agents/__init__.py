"""
Agents - Units of Conversation Processing

Each agent consumes and returns the ConversationState, using an LLMProvider
internally. Provider failures are absorbed inside the agent.
"""

from chatkit_ai.agents.base import Agent
from chatkit_ai.agents.classifier import ClassifierAgent
from chatkit_ai.agents.composer import ComposerAgent
from chatkit_ai.agents.guardrails import GuardrailsAgent

__all__ = [
    "Agent",
    "ClassifierAgent",
    "ComposerAgent",
    "GuardrailsAgent",
]
