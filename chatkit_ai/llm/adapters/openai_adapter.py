import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..interface import Completion, LLMProvider, ModerationResult
from ...exceptions import ProviderError

logger = logging.getLogger(__name__)

# USD per 1M tokens.
MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4-turbo": {"input": 10.00, "output": 30.00},
    "gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
}

EXTRACTION_TOOL_NAME = "extract_data"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


class OpenAIAdapter(LLMProvider):
    """
    OpenAI implementation of LLMProvider.

    The AsyncOpenAI client is the HTTP capability. It is built from the key,
    base URL and timeout unless one is injected (tests pass a fake).
    Retries are disabled: a failed call surfaces as ProviderError immediately.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        moderation_timeout: float = 10.0,
        extraction_model: str = "gpt-4o-mini",
        client: Optional[AsyncOpenAI] = None,
    ):
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        self.model_name = model_name
        self.extraction_model = extraction_model
        self.timeout = timeout
        self.moderation_timeout = moderation_timeout

    @property
    def name(self) -> str:
        return "openai"

    def set_model(self, model_name: str) -> "OpenAIAdapter":
        self.model_name = model_name
        return self

    async def complete(
        self,
        messages: List[dict],
        options: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        options = options or {}
        model = options.get("model") or self.model_name
        logger.debug(f"OpenAI completion: model={model} messages={len(messages)}")

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=options.get("temperature", DEFAULT_TEMPERATURE),
                max_tokens=options.get("max_tokens", DEFAULT_MAX_TOKENS),
            )
        except OpenAIError as e:
            raise ProviderError(f"OpenAI API error: {e}", provider=self.name) from e

        if not response.choices:
            raise ProviderError("No choices returned from OpenAI API", provider=self.name)

        choice = response.choices[0]
        return Completion(
            content=choice.message.content or "",
            metadata={
                "model": response.model,
                "usage": response.usage.model_dump() if response.usage else {},
                "finish_reason": choice.finish_reason,
                "provider": self.name,
            },
        )

    async def extract(self, messages: List[dict], schema: Dict[str, Any]) -> Dict[str, Any]:
        # Function calling gives us schema-shaped JSON arguments back.
        tool = {
            "type": "function",
            "function": {
                "name": EXTRACTION_TOOL_NAME,
                "description": "Extract structured data from the conversation",
                "parameters": schema,
            },
        }
        try:
            response = await self.client.chat.completions.create(
                model=self.extraction_model,
                messages=messages,
                temperature=0,
                tools=[tool],
                tool_choice={"type": "function", "function": {"name": EXTRACTION_TOOL_NAME}},
            )
        except OpenAIError as e:
            raise ProviderError(f"OpenAI API error: {e}", provider=self.name) from e

        tool_calls = response.choices[0].message.tool_calls if response.choices else None
        if not tool_calls:
            raise ProviderError("No tool calls returned from extraction", provider=self.name)

        arguments = tool_calls[0].function.arguments or "{}"
        try:
            extracted = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Could not decode extraction arguments: {e}", provider=self.name) from e

        if not isinstance(extracted, dict):
            raise ProviderError("Extraction arguments are not a JSON object", provider=self.name)
        return extracted

    async def stream(
        self,
        messages: List[dict],
        options: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[str]:
        options = options or {}
        try:
            chunks = await self.client.chat.completions.create(
                model=options.get("model") or self.model_name,
                messages=messages,
                temperature=options.get("temperature", DEFAULT_TEMPERATURE),
                max_tokens=options.get("max_tokens", DEFAULT_MAX_TOKENS),
                stream=True,
            )
            async for chunk in chunks:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except OpenAIError as e:
            raise ProviderError(f"OpenAI stream error: {e}", provider=self.name) from e

    async def moderate(self, content: str) -> ModerationResult:
        try:
            response = await self.client.with_options(
                timeout=self.moderation_timeout
            ).moderations.create(input=content)
        except OpenAIError as e:
            raise ProviderError(f"Moderation API error: {e}", provider=self.name) from e

        if not response.results:
            raise ProviderError("Invalid moderation API response", provider=self.name)

        result = response.results[0]
        categories = result.categories.model_dump(by_alias=True)
        return ModerationResult(
            flagged=bool(result.flagged),
            categories=[category for category, hit in categories.items() if hit],
        )

    async def health(self) -> bool:
        try:
            page = await self.client.models.list()
            return isinstance(page.data, list)
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False

    def get_models(self) -> List[str]:
        return list(MODEL_PRICING.keys())

    def estimate_cost(
        self, input_tokens: int, output_tokens: int, model: Optional[str] = None
    ) -> float:
        pricing = _pricing_for(model or self.model_name)
        input_cost = (input_tokens / 1_000_000) * pricing["input"]
        output_cost = (output_tokens / 1_000_000) * pricing["output"]
        return input_cost + output_cost


def _pricing_for(model: str) -> Dict[str, float]:
    """
    Exact id first, then the longest priced prefix, so dated snapshots
    ("gpt-4o-2024-08-06") are billed as their family. Unknown = free.
    """
    if model in MODEL_PRICING:
        return MODEL_PRICING[model]
    for known in sorted(MODEL_PRICING, key=len, reverse=True):
        if model.startswith(f"{known}-"):
            return MODEL_PRICING[known]
    return {"input": 0.0, "output": 0.0}
