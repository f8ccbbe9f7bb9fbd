"""
Composer Agent

Generates the reply the user sees. The system prompt combines a static
persona block with whatever earlier agents put into the state (location,
topic, urgency, events, offers, content). The last ten messages are sent as
history.

On provider failure the agent appends a canned reply keyed by the already
classified topic, so the user always gets an assistant message.
"""

import logging
from typing import Any, Dict, List

from .base import Agent
from .prompts import Template, render
from ..exceptions import ProviderError
from ..state.models import ConversationState

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 10
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 800
DEFAULT_BRAND = "MyCanadianLife"

FALLBACK_RESPONSES: Dict[str, str] = {
    "housing": (
        "I understand you're looking for housing information. I'm experiencing technical difficulties "
        "at the moment, but I'd recommend visiting MyCanadianLife.com for comprehensive housing "
        "resources for newcomers."
    ),
    "employment": (
        "I can help with employment questions. While I'm experiencing technical issues, you can find "
        "job search resources and employment guides at MyCanadianLife.com."
    ),
    "healthcare": (
        "Healthcare is important! Please visit MyCanadianLife.com for information about healthcare "
        "access in Canada, or try asking your question again in a moment."
    ),
    "education": (
        "For education and credential recognition information, please check MyCanadianLife.com. "
        "You can also try your question again shortly."
    ),
    "general": (
        "I'm here to help newcomers to Canada! I'm experiencing a brief technical issue. Please try "
        "your question again, or visit MyCanadianLife.com for resources."
    ),
}

SUGGESTIONS: Dict[str, List[str]] = {
    "housing": [
        "Tell me about rental assistance programs",
        "What are average rent prices?",
        "How do I find roommates?",
    ],
    "employment": [
        "How do I get my credentials recognized?",
        "Where can I find job boards?",
        "Tell me about resume writing",
    ],
    "healthcare": [
        "How do I get a health card?",
        "Where can I find a family doctor?",
        "What's covered by provincial health insurance?",
    ],
    "education": [
        "Where can I take language classes?",
        "Tell me about credential assessment",
        "What are the school enrollment requirements?",
    ],
    "general": [
        "What resources are available for newcomers?",
        "Tell me about community programs",
        "How can I connect with other newcomers?",
    ],
}


class ComposerAgent(Agent):
    """
    Config:
        temperature / max_tokens / model: sampling overrides.
        brand: Name used in the persona block.
        fallback_responses: Topic -> text, merged over the built-in replies.
    """

    async def execute(self, state: ConversationState) -> ConversationState:
        messages = [{"role": "system", "content": self.build_system_prompt(state)}]
        messages.extend(state.get_messages()[-HISTORY_WINDOW:])

        options: Dict[str, Any] = {
            "temperature": self.get_config("temperature", DEFAULT_TEMPERATURE),
            "max_tokens": self.get_config("max_tokens", DEFAULT_MAX_TOKENS),
        }
        if self.get_config("model"):
            options["model"] = self.get_config("model")

        try:
            completion = await self._prompt(messages, options)
        except ProviderError as e:
            logger.error(f"[{self.name}] Response composition failed: {e}")
            state.add_message(
                "assistant",
                self.get_fallback_response(state),
                {"agent": self.name, "fallback": True},
            )
            return state

        model = completion.metadata.get("model")
        usage = completion.metadata.get("usage") or {}

        state.add_message("assistant", completion.content, {"agent": self.name, "model": model})
        state.set_metadata("composer_model", model)
        state.set_metadata("composer_tokens", usage)
        state.set_metadata(
            "composer_cost_usd",
            self.provider.estimate_cost(
                usage.get("prompt_tokens", 0), usage.get("completion_tokens", 0), model
            ),
        )
        state.set("suggestions", self.get_suggestions(state))

        logger.info(f"[{self.name}] Response composed ({len(completion.content)} chars, usage={usage})")
        return state

    def build_system_prompt(self, state: ConversationState) -> str:
        return render(
            Template.COMPOSER_SYSTEM,
            brand=self.get_config("brand", DEFAULT_BRAND),
            location=state.get("location"),
            topic=state.get("topic"),
            urgency=state.get("urgency"),
            events=state.get("events", []),
            offers=state.get("offers", []),
            content=state.get("content", []),
        )

    def get_fallback_response(self, state: ConversationState) -> str:
        responses = {**FALLBACK_RESPONSES, **self.get_config("fallback_responses", {})}
        topic = state.get("topic", "general")
        return responses.get(topic, responses["general"])

    @staticmethod
    def get_suggestions(state: ConversationState) -> List[str]:
        topic = state.get("topic", "general")
        return SUGGESTIONS.get(topic, SUGGESTIONS["general"])
