"""Tests for the provider/agent Registry."""

import pytest

from chatkit_ai.agents import ClassifierAgent, ComposerAgent
from chatkit_ai.agents.base import Agent
from chatkit_ai.exceptions import ConfigurationError
from chatkit_ai.execution.registry import Registry
from tests.conftest import FakeProvider


class StrictAgent(Agent):
    required_config = ("api_endpoint",)

    async def execute(self, state):
        return state


class TestProviders:
    """Tests for provider registration and resolution."""

    def test_resolve_explicit(self):
        """Test an explicit provider name is used as-is."""
        fake = FakeProvider()
        registry = Registry().register_provider("other", fake)

        assert registry.resolve_provider("other") is fake

    def test_resolve_default(self):
        """Test None falls back to the configured default."""
        fake = FakeProvider()
        registry = Registry({"default_provider": "fake"}).register_provider("fake", fake)

        assert registry.resolve_provider() is fake

    def test_resolve_unknown_explicit(self):
        """Test an unregistered explicit provider is a configuration error."""
        with pytest.raises(ConfigurationError, match="Provider 'missing' not found"):
            Registry().resolve_provider("missing")

    def test_resolve_without_default(self):
        """Test resolution fails when no default is configured."""
        with pytest.raises(ConfigurationError, match="No default provider"):
            Registry().resolve_provider()

    def test_resolve_missing_default(self):
        """Test resolution fails when the default is not registered."""
        with pytest.raises(ConfigurationError, match="Default provider 'openai'"):
            Registry({"default_provider": "openai"}).resolve_provider()

    def test_get_providers_is_a_copy(self):
        """Test the returned provider map cannot mutate the registry."""
        registry = Registry().register_provider("fake", FakeProvider())

        registry.get_providers().clear()

        assert registry.has_provider("fake")


class TestAgents:
    """Tests for lazy agent construction and caching."""

    def test_unknown_agent_is_none(self, registry):
        """Test unknown agent names return None."""
        assert registry.get_agent("NopeAgent") is None

    def test_agent_is_cached(self, registry):
        """Test the same instance is returned on repeated lookups."""
        first = registry.get_agent("ClassifierAgent")

        assert isinstance(first, ClassifierAgent)
        assert registry.get_agent("ClassifierAgent") is first

    def test_fresh_instance_bypasses_cache(self, registry):
        """Test fresh=True builds a new instance and leaves the cache alone."""
        cached = registry.get_agent("ClassifierAgent")
        fresh = registry.get_agent("ClassifierAgent", fresh=True)

        assert fresh is not cached
        assert registry.get_agent("ClassifierAgent") is cached

    def test_clear_cache(self, registry):
        """Test clearing the cache forces a rebuild."""
        first = registry.get_agent("ComposerAgent")

        registry.clear_agent_cache("ComposerAgent")

        assert registry.get_agent("ComposerAgent") is not first

    def test_factory_runs_lazily(self):
        """Test the factory is not called at registration time."""
        calls = []

        def factory():
            calls.append(1)
            return ComposerAgent(FakeProvider())

        registry = Registry().register_agent_factory("ComposerAgent", factory)
        assert calls == []

        registry.get_agent("ComposerAgent")
        registry.get_agent("ComposerAgent")
        assert calls == [1]

    def test_explicit_provider_and_config(self):
        """Test an agent gets its named provider and static config."""
        fake = FakeProvider()
        registry = Registry().register_provider("special", fake)
        registry.register_agent_class("Composer", ComposerAgent, "special", {"temperature": 0.1})

        agent = registry.get_agent("Composer")

        assert agent.provider is fake
        assert agent.get_config("temperature") == 0.1

    def test_missing_provider_surfaces_on_lookup(self):
        """Test provider errors appear when the agent is built, not registered."""
        registry = Registry().register_agent_class("ComposerAgent", ComposerAgent, "ghost")

        with pytest.raises(ConfigurationError):
            registry.get_agent("ComposerAgent")

    def test_dotted_path(self, provider):
        """Test agent classes can be given as import paths."""
        registry = Registry({"default_provider": "fake"}).register_provider("fake", provider)
        registry.register_agent_class("Guard", "chatkit_ai.agents.guardrails.GuardrailsAgent")

        assert type(registry.get_agent("Guard")).__name__ == "GuardrailsAgent"

    def test_bad_dotted_path(self, provider):
        """Test an unknown import path is a configuration error."""
        registry = Registry({"default_provider": "fake"}).register_provider("fake", provider)
        registry.register_agent_class("Ghost", "chatkit_ai.agents.nowhere.GhostAgent")

        with pytest.raises(ConfigurationError, match="not found"):
            registry.get_agent("Ghost")

    def test_non_agent_class(self, provider):
        """Test classes that are not agents are rejected."""
        registry = Registry({"default_provider": "fake"}).register_provider("fake", provider)
        registry.register_agent_class("Dict", dict)

        with pytest.raises(ConfigurationError, match="not an Agent subclass"):
            registry.get_agent("Dict")

    def test_required_config(self, provider):
        """Test missing required config keys fail construction."""
        with pytest.raises(ConfigurationError, match="api_endpoint"):
            StrictAgent(provider)

    def test_agent_name_from_config(self, provider):
        """Test the configured name overrides the class name."""
        assert StrictAgent(provider, {"api_endpoint": "x", "name": "Events"}).get_name() == "Events"
        assert StrictAgent(provider, {"api_endpoint": "x"}).get_name() == "StrictAgent"

    def test_agent_names(self, registry):
        """Test registered names are listed."""
        assert registry.get_agent_names() == ["GuardrailsAgent", "ClassifierAgent", "ComposerAgent"]
        assert registry.has_agent("ComposerAgent")
        assert not registry.has_agent("EventsAgent")

    def test_load_config(self):
        """Test config is merged."""
        registry = Registry({"default_provider": "a"}).load_config({"default_provider": "b", "x": 1})

        assert registry.get_config("default_provider") == "b"
        assert registry.get_config("x") == 1
