"""
Schemas - Structured Output Models for LLM Responses

The Classification model doubles as the JSON schema handed to the provider's
extraction call and as the validator for what comes back.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Topic = Literal[
    "housing",
    "employment",
    "healthcare",
    "education",
    "entertainment",
    "legal",
    "transportation",
    "finance",
    "general",
]

Urgency = Literal["low", "medium", "high"]

DEFAULT_TOPIC: Topic = "general"
DEFAULT_URGENCY: Urgency = "medium"


class Classification(BaseModel):
    """
    What the ClassifierAgent extracts from the latest user message.
    """
    topic: Topic = Field(
        ...,
        description="Primary topic category"
    )
    urgency: Urgency = Field(
        ...,
        description="How time-sensitive is this request"
    )
    location: Optional[str] = Field(
        None,
        description="City or region in Canada mentioned by the user"
    )
    intent: Optional[str] = Field(
        None,
        description="What the user wants to accomplish"
    )
    entities: Optional[Dict[str, List[str]]] = Field(
        None,
        description="Other relevant entities, e.g. {'dates': [...], 'organizations': [...]}"
    )


def extraction_schema() -> dict:
    """JSON schema for function-calling extraction (required: topic, urgency)."""
    schema = Classification.model_json_schema()
    schema.pop("title", None)
    return schema
