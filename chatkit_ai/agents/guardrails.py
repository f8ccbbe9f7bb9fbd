"""
Guardrails Agent - Content Moderation

Runs first in a workflow. Checks the latest user message with the provider's
moderation endpoint and falls back to local heuristics when that call fails.
An unsafe message sets 'blocked', which conditional edges use to end the run
before any other agent is invoked.
"""

import logging
import re
from typing import Dict, List

from .base import Agent
from ..exceptions import ProviderError
from ..state.models import ConversationState

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 10_000
DEFAULT_MAX_CAPS_RATIO = 0.5

DEFAULT_BLOCKED_MESSAGE = (
    "I'm sorry, but I cannot process this request as it may violate our content policy. "
    "Please rephrase your question or contact support if you believe this is an error."
)

DEFAULT_SPAM_PATTERNS = [
    r"\b(viagra|cialis|casino|poker)\b",
    r"\b(buy now|click here|limited time)\b",
]

URL_PATTERN = r"https?://\S+"

PII_PATTERNS: Dict[str, str] = {
    "email": r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b",
    "phone": r"\b(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b",
    "sin": r"\b\d{3}[-\s]?\d{3}[-\s]?\d{3}\b",
}

REASON_TOO_LONG = "message_too_long"
REASON_POLICY = "content_policy_violation"


class GuardrailsAgent(Agent):
    """
    Config:
        blocked_message: Assistant reply appended when a message is blocked.
        max_length: Messages longer than this are blocked without a remote call.
        spam_patterns: Regexes for the heuristic fallback.
        block_urls: Heuristic fallback rejects any URL (default True).
        max_caps_ratio: Heuristic fallback rejects upper-case ratios above this.
    """

    async def execute(self, state: ConversationState) -> ConversationState:
        user_message = state.get_last_user_message()
        if not user_message:
            logger.debug(f"[{self.name}] No message to moderate")
            return state

        # Verdicts from an earlier turn must not leak into this one
        for key in ("blocked", "block_reason", "pii_detected"):
            state.remove(key)

        pii = self.detect_pii(user_message)
        if pii:
            state.set("pii_detected", pii)

        max_length = self.get_config("max_length", DEFAULT_MAX_LENGTH)
        if len(user_message) > max_length:
            logger.warning(f"[{self.name}] Message too long ({len(user_message)} chars)")
            return self._block(state, REASON_TOO_LONG)

        if not await self._moderate(user_message):
            return self._block(state, REASON_POLICY)

        state.set("content_safe", True)
        logger.info(f"[{self.name}] Content passed moderation")
        return state

    async def _moderate(self, content: str) -> bool:
        """True if the content is safe."""
        try:
            result = await self.provider.moderate(content)
        except ProviderError as e:
            logger.warning(f"[{self.name}] Moderation API failed, using fallback: {e}")
            return self.basic_content_check(content)

        if result.flagged:
            logger.info(f"[{self.name}] Content flagged by moderation API: {result.categories}")
            return False
        return True

    def basic_content_check(self, content: str) -> bool:
        """Heuristic fallback used only when the moderation call fails."""
        patterns = list(self.get_config("spam_patterns", DEFAULT_SPAM_PATTERNS))
        if self.get_config("block_urls", True):
            patterns.append(URL_PATTERN)

        for pattern in patterns:
            if re.search(pattern, content, re.IGNORECASE):
                return False

        letters = [ch for ch in content if ch.isascii() and ch.isalpha()]
        if letters:
            upper_ratio = sum(1 for ch in letters if ch.isupper()) / len(letters)
            if upper_ratio > self.get_config("max_caps_ratio", DEFAULT_MAX_CAPS_RATIO):
                return False

        return True

    @staticmethod
    def detect_pii(content: str) -> List[str]:
        """Kinds of personal information found in the content. Informational only."""
        return [
            kind
            for kind, pattern in PII_PATTERNS.items()
            if re.search(pattern, content, re.IGNORECASE)
        ]

    def _block(self, state: ConversationState, reason: str) -> ConversationState:
        state.set("content_safe", False)
        state.set("blocked", True)
        state.set("block_reason", reason)
        state.add_message(
            "assistant",
            self.get_config("blocked_message", DEFAULT_BLOCKED_MESSAGE),
            {"agent": self.name, "blocked": True},
        )
        logger.warning(f"[{self.name}] Content blocked: {reason}")
        return state
