"""
Bootstrap - builds the Registry from settings and agent definitions.

Providers are created from settings; a provider whose credential is missing
is skipped with a warning, so agents bound to it fail with a
ConfigurationError only when first requested.
"""

import logging
from typing import Dict, Optional

from .config import Settings
from .data.agents import AGENT_DEFINITIONS
from .domain.models import AgentDefinition
from .execution.registry import Registry
from .llm.adapters.openai_adapter import OpenAIAdapter

logger = logging.getLogger(__name__)


def build_registry(
    settings: Settings,
    agent_definitions: Optional[Dict[str, AgentDefinition]] = None,
) -> Registry:
    registry = Registry({"default_provider": settings.DEFAULT_LLM_PROVIDER})

    if settings.OPENAI_API_KEY:
        registry.register_provider(
            "openai",
            OpenAIAdapter(
                api_key=settings.OPENAI_API_KEY,
                model_name=settings.resolve_model(settings.OPENAI_DEFAULT_MODEL),
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.PROVIDER_TIMEOUT,
                moderation_timeout=settings.MODERATION_TIMEOUT,
                extraction_model=settings.resolve_model(settings.OPENAI_EXTRACTION_MODEL),
            ),
        )
    else:
        logger.warning("OpenAI API key not configured; provider 'openai' not registered")

    definitions = AGENT_DEFINITIONS if agent_definitions is None else agent_definitions
    for name, definition in definitions.items():
        config = dict(definition.config)
        if config.get("model"):
            config["model"] = settings.resolve_model(config["model"])

        registry.register_agent_class(name, definition.agent_class, definition.provider, config)

    return registry
