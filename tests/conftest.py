"""Shared test fixtures for the test suite."""

from typing import Any, AsyncIterator, Dict, List, Optional

import pytest

from chatkit_ai.exceptions import ProviderError
from chatkit_ai.execution.registry import Registry
from chatkit_ai.llm.interface import Completion, LLMProvider, ModerationResult
from chatkit_ai.state.models import ConversationState


class FakeProvider(LLMProvider):
    """Scripted provider that records every call and never touches the network.

    Set ``*_error`` attributes to make the matching call raise.
    """

    def __init__(
        self,
        completion: str = "Here is some help.",
        extraction: Optional[Dict[str, Any]] = None,
        moderation: Optional[ModerationResult] = None,
    ):
        self.completion = completion
        self.extraction = extraction if extraction is not None else {"topic": "general", "urgency": "low"}
        self.moderation = moderation or ModerationResult(flagged=False)
        self.complete_error: Optional[Exception] = None
        self.extract_error: Optional[Exception] = None
        self.moderate_error: Optional[Exception] = None
        self.healthy = True
        self.priced_model: Optional[str] = None
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return "fake"

    async def complete(self, messages, options=None) -> Completion:
        self.calls.append(("complete", messages, options))
        if self.complete_error:
            raise self.complete_error
        return Completion(
            content=self.completion,
            metadata={
                "model": (options or {}).get("model", "fake-model"),
                "usage": {"prompt_tokens": 100, "completion_tokens": 50, "total_tokens": 150},
                "finish_reason": "stop",
                "provider": self.name,
            },
        )

    async def extract(self, messages, schema) -> Dict[str, Any]:
        self.calls.append(("extract", messages, schema))
        if self.extract_error:
            raise self.extract_error
        return dict(self.extraction)

    async def stream(self, messages, options=None) -> AsyncIterator[str]:
        self.calls.append(("stream", messages, options))
        for word in self.completion.split():
            yield word

    async def moderate(self, content: str) -> ModerationResult:
        self.calls.append(("moderate", content))
        if self.moderate_error:
            raise self.moderate_error
        return self.moderation

    async def health(self) -> bool:
        return self.healthy

    def get_models(self) -> List[str]:
        return ["fake-model"]

    def estimate_cost(self, input_tokens: int, output_tokens: int, model: Optional[str] = None) -> float:
        self.priced_model = model
        return (input_tokens + output_tokens) / 1_000_000

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def provider() -> FakeProvider:
    """A fake provider returning a housing classification and a fixed reply."""
    return FakeProvider(
        completion="Here are some housing resources in Toronto.",
        extraction={"topic": "housing", "urgency": "medium", "location": "Toronto"},
    )


@pytest.fixture
def failing_provider() -> FakeProvider:
    """A fake provider whose every remote call fails."""
    fake = FakeProvider()
    fake.complete_error = ProviderError("boom", provider="fake")
    fake.extract_error = ProviderError("boom", provider="fake")
    fake.moderate_error = ProviderError("boom", provider="fake")
    fake.healthy = False
    return fake


@pytest.fixture
def registry(provider) -> Registry:
    """A registry with the fake provider as default and the three core agents."""
    from chatkit_ai.agents import ClassifierAgent, ComposerAgent, GuardrailsAgent

    reg = Registry({"default_provider": "fake"})
    reg.register_provider("fake", provider)
    reg.register_agent_class("GuardrailsAgent", GuardrailsAgent)
    reg.register_agent_class("ClassifierAgent", ClassifierAgent)
    reg.register_agent_class("ComposerAgent", ComposerAgent)
    return reg


@pytest.fixture
def state() -> ConversationState:
    """A conversation with one user message."""
    conversation = ConversationState(conversation_id="conv_test")
    conversation.add_message("user", "I need help finding housing in Toronto")
    return conversation
