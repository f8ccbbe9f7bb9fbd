"""
Schemas - Structured Output Models for LLM Responses
"""

from chatkit_ai.schemas.classification import (
    DEFAULT_TOPIC,
    DEFAULT_URGENCY,
    Classification,
    Topic,
    Urgency,
    extraction_schema,
)

__all__ = [
    "DEFAULT_TOPIC",
    "DEFAULT_URGENCY",
    "Classification",
    "Topic",
    "Urgency",
    "extraction_schema",
]
