from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import BaseModel, Field

from ..exceptions import ProviderError


class Completion(BaseModel):
    """Generated text plus what the backend reported about the call."""
    content: str
    # model, usage, finish_reason, provider
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ModerationResult(BaseModel):
    flagged: bool
    categories: List[str] = Field(default_factory=list)


class LLMProvider(ABC):
    """
    Abstract Base Class interface that defines the contract for any LLM provider
    (OpenAI, Anthropic, Local LLaMA, etc.)

    Providers hold a credential and a default model and are stateless per call,
    so one instance can be shared by concurrent conversations. Each call makes
    at most one outbound request; retry policy belongs to the caller.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def get_name(self) -> str:
        return self.name

    @abstractmethod
    async def complete(
        self,
        messages: List[dict],
        options: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        """
        Sends the chat messages with sampling options (temperature, max_tokens, model).
        Raises ProviderError when the remote call fails or returns no choices.
        """
        pass

    @abstractmethod
    async def extract(self, messages: List[dict], schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Forces the model to answer with arguments matching the JSON 'schema'.
        Always deterministic (temperature 0), regardless of caller options.
        Raises ProviderError when no structured result comes back.
        """
        pass

    @abstractmethod
    def stream(
        self,
        messages: List[dict],
        options: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[str]:
        """Yields text deltas as they arrive."""
        pass

    @abstractmethod
    async def health(self) -> bool:
        """Lightweight reachability probe. Never raises."""
        pass

    @abstractmethod
    def get_models(self) -> List[str]:
        pass

    @abstractmethod
    def estimate_cost(
        self, input_tokens: int, output_tokens: int, model: Optional[str] = None
    ) -> float:
        """USD estimate for 'model', or the provider's current default model."""
        pass

    async def moderate(self, content: str) -> ModerationResult:
        """
        Content-safety check. Providers without a moderation endpoint keep this
        default, which callers treat like any other provider failure.
        """
        raise ProviderError("moderation not supported", provider=self.name)
