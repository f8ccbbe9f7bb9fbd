"""
Registered agents.

Provider None = registry default. Model choice per agent uses the provider's
alias map ("fast", "smart") and is resolved at bootstrap.
"""

from typing import Dict

from chatkit_ai.config import settings
from chatkit_ai.domain.models import AgentDefinition


AGENT_DEFINITIONS: Dict[str, AgentDefinition] = {
    # Fast moderation
    "GuardrailsAgent": AgentDefinition(
        agent_class="chatkit_ai.agents.guardrails.GuardrailsAgent",
        provider="openai",
        config={
            "blocked_message": settings.BLOCKED_MESSAGE,
            "max_length": 10_000,
            "block_urls": True,
        },
    ),
    # Extraction always runs on the provider's pinned extraction model
    "ClassifierAgent": AgentDefinition(
        agent_class="chatkit_ai.agents.classifier.ClassifierAgent",
        provider="openai",
    ),
    # Better writing
    "ComposerAgent": AgentDefinition(
        agent_class="chatkit_ai.agents.composer.ComposerAgent",
        provider="openai",
        config={
            "model": "smart",
            "temperature": 0.7,
            "max_tokens": 800,
        },
    ),
}
