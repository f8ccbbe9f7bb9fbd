"""
Registry - Provider and Agent Lookup

Central factory for configured providers and agents. Agents are registered as
factories and only built on first request, resolving their provider at that
moment. Built agents are cached per name unless a fresh instance is asked for.

The cache holds only configured, stateless objects, so it is safe to share
across concurrent conversations.
"""

import importlib
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from ..agents.base import Agent
from ..exceptions import ConfigurationError
from ..llm.interface import LLMProvider

logger = logging.getLogger(__name__)

AgentFactory = Callable[[], Agent]


class Registry:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        # Recognised keys: default_provider
        self._config: Dict[str, Any] = dict(config or {})
        self._providers: Dict[str, LLMProvider] = {}
        self._agent_factories: Dict[str, AgentFactory] = {}
        self._agent_instances: Dict[str, Agent] = {}

    # ==========================================================================
    # Providers
    # ==========================================================================

    def register_provider(self, name: str, provider: LLMProvider) -> "Registry":
        self._providers[name] = provider
        return self

    def get_provider(self, name: str) -> Optional[LLMProvider]:
        return self._providers.get(name)

    def get_providers(self) -> Dict[str, LLMProvider]:
        return dict(self._providers)

    def has_provider(self, name: str) -> bool:
        return name in self._providers

    def resolve_provider(self, provider_name: Optional[str] = None) -> LLMProvider:
        """
        Explicit name wins; None falls back to the configured default.
        Raises ConfigurationError when the chosen provider is not registered.
        """
        if provider_name is not None:
            provider = self.get_provider(provider_name)
            if provider is None:
                raise ConfigurationError(f"Provider '{provider_name}' not found")
            return provider

        default_name = self._config.get("default_provider")
        if default_name is None:
            raise ConfigurationError("No default provider configured")

        provider = self.get_provider(default_name)
        if provider is None:
            raise ConfigurationError(f"Default provider '{default_name}' not found")
        return provider

    # ==========================================================================
    # Agents
    # ==========================================================================

    def register_agent_factory(self, name: str, factory: AgentFactory) -> "Registry":
        self._agent_factories[name] = factory
        return self

    def register_agent_class(
        self,
        name: str,
        agent_class: Union[type, str],
        provider_name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> "Registry":
        """
        Stores a factory; nothing is instantiated (or imported) until get_agent().
        'agent_class' may be a class or a dotted import path.
        """
        static_config = dict(config or {})

        def factory() -> Agent:
            provider = self.resolve_provider(provider_name)
            cls = _load_agent_class(agent_class)
            return cls(provider, static_config)

        return self.register_agent_factory(name, factory)

    def get_agent(self, name: str, fresh: bool = False) -> Optional[Agent]:
        """
        Returns the agent, building it on first use. Unknown names return None;
        deciding whether that is an error is the caller's job.
        """
        if not fresh and name in self._agent_instances:
            return self._agent_instances[name]

        factory = self._agent_factories.get(name)
        if factory is None:
            return None

        agent = factory()
        if not fresh:
            self._agent_instances[name] = agent
            logger.debug(f"Agent '{name}' instantiated and cached")
        return agent

    def get_agent_names(self) -> List[str]:
        return list(self._agent_factories.keys())

    def has_agent(self, name: str) -> bool:
        return name in self._agent_factories

    def clear_agent_cache(self, name: Optional[str] = None) -> "Registry":
        if name is None:
            self._agent_instances.clear()
        else:
            self._agent_instances.pop(name, None)
        return self

    # ==========================================================================
    # Configuration
    # ==========================================================================

    def load_config(self, config: Dict[str, Any]) -> "Registry":
        self._config.update(config)
        return self

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)


def _load_agent_class(agent_class: Union[type, str]) -> type:
    if isinstance(agent_class, type):
        cls = agent_class
    else:
        module_path, _, class_name = agent_class.rpartition(".")
        try:
            cls = getattr(importlib.import_module(module_path), class_name)
        except (ImportError, AttributeError, ValueError) as e:
            raise ConfigurationError(f"Agent class '{agent_class}' not found") from e

    if not (isinstance(cls, type) and issubclass(cls, Agent)):
        raise ConfigurationError(f"'{agent_class}' is not an Agent subclass")
    return cls
