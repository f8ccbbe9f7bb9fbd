"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChatContext(BaseModel):
    location: Optional[str] = None
    user_email: Optional[str] = None
    newcomer_profile: Optional[Dict[str, Any]] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    conversation_id: Optional[str] = None
    context: Optional[ChatContext] = None
    workflow: Optional[str] = None


class ChatMetadata(BaseModel):
    workflow: str
    agents_used: List[str]
    topic: Optional[str] = None
    location: Optional[str] = None
    latency_ms: float


class ChatResponse(BaseModel):
    success: bool = True
    conversation_id: str
    message: str
    metadata: ChatMetadata
    suggestions: Optional[List[str]] = None
    offers: Optional[List[Dict[str, Any]]] = None
    events: Optional[List[Dict[str, Any]]] = None


class ErrorDetail(BaseModel):
    message: str
    code: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail


class ChatMessage(BaseModel):
    role: str
    content: str
    timestamp: datetime


class ConversationRead(BaseModel):
    conversation_id: str
    messages: List[ChatMessage]
    data: Dict[str, Any]
    agents_used: List[str]


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    providers: Dict[str, bool]
    agents: Dict[str, str]
