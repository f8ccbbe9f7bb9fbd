"""Tests for the ComposerAgent."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from openai.types.chat import ChatCompletion

from chatkit_ai.agents import ComposerAgent
from chatkit_ai.agents.composer import FALLBACK_RESPONSES, SUGGESTIONS
from chatkit_ai.llm.adapters.openai_adapter import OpenAIAdapter
from chatkit_ai.state.models import ConversationState

HOUSING_FALLBACK = (
    "I understand you're looking for housing information. I'm experiencing technical difficulties "
    "at the moment, but I'd recommend visiting MyCanadianLife.com for comprehensive housing "
    "resources for newcomers."
)


class TestComposerSuccess:
    """Tests for a successful completion."""

    @pytest.mark.asyncio
    async def test_appends_reply_with_metadata(self, provider, state):
        """Test the reply is appended with agent and model metadata."""
        agent = ComposerAgent(provider)

        result = await agent.execute(state)

        last = result.messages[-1]
        assert last.role == "assistant"
        assert last.content == "Here are some housing resources in Toronto."
        assert last.metadata == {"agent": "ComposerAgent", "model": "fake-model"}

    @pytest.mark.asyncio
    async def test_records_usage_and_cost(self, provider, state):
        """Test model, token usage and cost are kept in metadata."""
        agent = ComposerAgent(provider)

        result = await agent.execute(state)

        assert result.get_metadata("composer_model") == "fake-model"
        assert result.get_metadata("composer_tokens")["total_tokens"] == 150
        assert result.get_metadata("composer_cost_usd") == pytest.approx(150 / 1_000_000)

    @pytest.mark.asyncio
    async def test_default_options(self, provider, state):
        """Test default sampling options."""
        agent = ComposerAgent(provider)

        await agent.execute(state)

        options = provider.calls[0][2]
        assert options == {"temperature": 0.7, "max_tokens": 800}

    @pytest.mark.asyncio
    async def test_config_overrides_options(self, provider, state):
        """Test temperature, max_tokens and model come from config."""
        agent = ComposerAgent(provider, {"temperature": 0.2, "max_tokens": 100, "model": "gpt-4o"})

        result = await agent.execute(state)

        options = provider.calls[0][2]
        assert options == {"temperature": 0.2, "max_tokens": 100, "model": "gpt-4o"}
        assert result.get_metadata("composer_model") == "gpt-4o"

    @pytest.mark.asyncio
    async def test_history_window(self, provider):
        """Test only the last ten messages follow the system prompt."""
        state = ConversationState(conversation_id="conv_long")
        for i in range(15):
            state.add_message("user" if i % 2 == 0 else "assistant", f"message {i}")
        agent = ComposerAgent(provider)

        await agent.execute(state)

        messages = provider.calls[0][1]
        assert len(messages) == 11
        assert messages[0]["role"] == "system"
        assert messages[1]["content"] == "message 5"
        assert messages[-1]["content"] == "message 14"

    @pytest.mark.asyncio
    async def test_suggestions_by_topic(self, provider, state):
        """Test suggestions follow the classified topic."""
        state.set("topic", "housing")
        agent = ComposerAgent(provider)

        result = await agent.execute(state)

        assert result.get("suggestions") == SUGGESTIONS["housing"]


class TestComposerSystemPrompt:
    """Tests for the system prompt built from state."""

    def test_includes_context(self, provider, state):
        """Test location, topic and urgency note are rendered."""
        state.set("location", "Toronto")
        state.set("topic", "housing")
        state.set("urgency", "high")
        agent = ComposerAgent(provider)

        prompt = agent.build_system_prompt(state)

        assert "MyCanadianLife" in prompt
        assert "**User Location:** Toronto" in prompt
        assert "**Topic:** housing" in prompt
        assert "time-sensitive" in prompt

    def test_omits_missing_context(self, provider, state):
        """Test absent data leaves no empty sections."""
        agent = ComposerAgent(provider)

        prompt = agent.build_system_prompt(state)

        assert "User Location" not in prompt
        assert "time-sensitive" not in prompt
        assert "Relevant Events" not in prompt

    def test_events_and_offers(self, provider, state):
        """Test events, offers and content fragments are listed."""
        state.set("events", [{"title": "Job Fair", "date": "2025-03-01", "description": "Meet employers"}])
        state.set("offers", [{"partner": "RBC", "title": "Newcomer account", "description": "No fees"}])
        state.set("content", [{"title": "Renting 101", "excerpt": "How leases work"}])
        agent = ComposerAgent(provider, {"brand": "Acme"})

        prompt = agent.build_system_prompt(state)

        assert "- Job Fair (2025-03-01): Meet employers" in prompt
        assert "- RBC: Newcomer account - No fees" in prompt
        assert "**Related Acme Content:**" in prompt
        assert "- Renting 101: How leases work" in prompt


class TestComposerFallback:
    """Tests for canned replies when the provider fails."""

    @pytest.mark.asyncio
    async def test_housing_fallback(self, failing_provider, state):
        """Test the housing fallback text is appended verbatim."""
        state.set("topic", "housing")
        agent = ComposerAgent(failing_provider)

        result = await agent.execute(state)

        last = result.messages[-1]
        assert last.content == HOUSING_FALLBACK
        assert last.metadata == {"agent": "ComposerAgent", "fallback": True}

    @pytest.mark.asyncio
    async def test_unknown_topic_uses_general(self, failing_provider, state):
        """Test topics without a canned reply use the general one."""
        state.set("topic", "legal")
        agent = ComposerAgent(failing_provider)

        result = await agent.execute(state)

        assert result.get_last_assistant_message() == FALLBACK_RESPONSES["general"]

    @pytest.mark.asyncio
    async def test_configured_fallbacks(self, failing_provider, state):
        """Test configured fallback texts override the built-in ones."""
        state.set("topic", "legal")
        agent = ComposerAgent(failing_provider, {"fallback_responses": {"legal": "Call a lawyer."}})

        result = await agent.execute(state)

        assert result.get_last_assistant_message() == "Call a lawyer."

    @pytest.mark.asyncio
    async def test_fallback_leaves_usage_unset(self, failing_provider, state):
        """Test no usage metadata is recorded on fallback."""
        agent = ComposerAgent(failing_provider)

        result = await agent.execute(state)

        assert result.get_metadata("composer_tokens") is None


class TestComposerCost:
    """Tests for cost accounting against the model actually used."""

    @pytest.mark.asyncio
    async def test_cost_priced_by_response_model(self, provider, state):
        """Test the reported model is the one priced."""
        agent = ComposerAgent(provider, {"model": "gpt-4o"})

        await agent.execute(state)

        assert provider.priced_model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_openai_cost_uses_composer_model(self, state):
        """Test a gpt-4o reply is billed at gpt-4o rates, not the adapter default."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=ChatCompletion.model_validate(
                {
                    "id": "chatcmpl-1",
                    "object": "chat.completion",
                    "created": 0,
                    "model": "gpt-4o-2024-08-06",
                    "choices": [
                        {"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": "Hi"}}
                    ],
                    "usage": {"prompt_tokens": 1_000_000, "completion_tokens": 0, "total_tokens": 1_000_000},
                }
            )
        )
        adapter = OpenAIAdapter(api_key="sk-test", model_name="gpt-4o-mini", client=client)
        agent = ComposerAgent(adapter, {"model": "gpt-4o"})

        result = await agent.execute(state)

        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"
        assert result.get_metadata("composer_cost_usd") == pytest.approx(2.50)
