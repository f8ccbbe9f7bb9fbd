"""
Agent Base Class

An Agent is a single-purpose unit of conversation processing. It receives the
ConversationState, calls its Provider, mutates the state and returns it.

Agents hold only a name, a provider and a static config map. They own no
per-request data, so one cached instance can serve concurrent conversations.
Trace entries are written by the Workflow, not by agents.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import ConfigurationError
from ..llm.interface import Completion, LLMProvider
from ..state.models import ConversationState

logger = logging.getLogger(__name__)


class Agent(ABC):
    # Config keys that must be present; checked at construction.
    required_config: Sequence[str] = ()

    # 1. DEPENDENCY INJECTION: We ask for the generic Provider
    def __init__(self, provider: LLMProvider, config: Optional[Dict[str, Any]] = None):
        self.provider = provider
        self.config: Dict[str, Any] = dict(config or {})
        self.name: str = self.config.get("name") or type(self).__name__
        self._validate_config()

    @abstractmethod
    async def execute(self, state: ConversationState) -> ConversationState:
        pass

    def get_name(self) -> str:
        return self.name

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def _validate_config(self) -> None:
        missing = [key for key in self.required_config if key not in self.config]
        if missing:
            raise ConfigurationError(
                f"Agent {self.name} missing required configuration: {', '.join(missing)}"
            )

    async def _prompt(
        self, messages: List[dict], options: Optional[Dict[str, Any]] = None
    ) -> Completion:
        """Provider completion with latency logging. Errors propagate to the agent."""
        started = time.perf_counter()
        try:
            completion = await self.provider.complete(messages, options)
        except Exception as e:
            logger.error(f"[{self.name}] Completion failed: {e}")
            raise

        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"[{self.name}] Completion took {latency_ms}ms "
            f"(provider={self.provider.name}, input_messages={len(messages)})"
        )
        return completion

    async def _extract(self, messages: List[dict], schema: Dict[str, Any]) -> Dict[str, Any]:
        return await self.provider.extract(messages, schema)
