"""
Classifier Agent

Extracts topic, urgency, location, intent and entities from the latest user
message via the provider's structured extraction. Classification failure
never aborts a workflow: the agent falls back to safe defaults.
"""

import logging
from typing import Any, Dict

from pydantic import TypeAdapter, ValidationError

from .base import Agent
from .prompts import Template, render
from ..exceptions import ProviderError
from ..schemas.classification import (
    DEFAULT_TOPIC,
    DEFAULT_URGENCY,
    Classification,
    extraction_schema,
)
from ..state.models import ConversationState

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("topic", "urgency")

TOPIC_DESCRIPTIONS = {
    "housing": "Finding places to live, rental assistance",
    "employment": "Job search, resume help, work permits",
    "healthcare": "Medical services, insurance, doctors",
    "education": "Schools, language classes, credentials recognition",
    "entertainment": "Events, activities, community programs",
    "legal": "Immigration, taxes, legal rights",
    "transportation": "Public transit, driver's license",
    "finance": "Banking, credit, budgeting",
    "general": "Other topics or unclear",
}


class ClassifierAgent(Agent):

    async def execute(self, state: ConversationState) -> ConversationState:
        user_message = state.get_last_user_message()
        if not user_message:
            logger.debug(f"[{self.name}] No user message to classify")
            return state

        messages = [
            {"role": "system", "content": render(Template.CLASSIFIER_SYSTEM, topics=TOPIC_DESCRIPTIONS)},
            {"role": "user", "content": user_message},
        ]

        try:
            extracted = await self._extract(messages, extraction_schema())
            classification = Classification.model_validate(
                {key: extracted.get(key) for key in REQUIRED_FIELDS}
            )
        except (ProviderError, ValidationError) as e:
            logger.warning(f"[{self.name}] Classification failed, using defaults: {e}")
            state.set("topic", DEFAULT_TOPIC)
            state.set("urgency", DEFAULT_URGENCY)
            return state

        classification = classification.model_copy(update=self._optional_fields(extracted))

        # Only write what the model actually returned
        for key, value in classification.model_dump(exclude_none=True).items():
            if value in ("", {}, []):
                continue
            state.set(key, value)

        logger.info(
            f"[{self.name}] Classified topic={classification.topic} "
            f"urgency={classification.urgency} location={classification.location}"
        )
        return state

    def _optional_fields(self, extracted: Dict[str, Any]) -> Dict[str, Any]:
        """Optional fields that validate; a malformed one is dropped on its own."""
        valid: Dict[str, Any] = {}
        for key, field in Classification.model_fields.items():
            if key in REQUIRED_FIELDS or extracted.get(key) is None:
                continue
            try:
                valid[key] = TypeAdapter(field.annotation).validate_python(extracted[key])
            except ValidationError as e:
                logger.warning(f"[{self.name}] Dropping malformed '{key}': {e}")
        return valid
