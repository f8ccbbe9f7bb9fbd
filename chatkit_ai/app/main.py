import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import JSONResponse, Response

from .dependencies import get_chat_service
from ..config import settings
from ..services.chat import ChatService
from .schemas import (
    ChatMessage,
    ChatMetadata,
    ChatRequest,
    ChatResponse,
    ConversationRead,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
)

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="ChatKit AI Backend")

GENERIC_ERROR = ErrorResponse(
    error=ErrorDetail(
        message="An error occurred while processing your request.",
        code="processing_error",
    )
)

# --- Endpoints ---

@app.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}},
)
async def handle_chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service)
):
    try:
        turn = await service.process_message(
            message=request.message,
            conversation_id=request.conversation_id,
            context=request.context.model_dump(exclude_none=True) if request.context else None,
            workflow_name=request.workflow,
        )
    except Exception:
        # Detail goes to the log only; users get a generic failure.
        logger.exception(f"Chat request failed (conversation_id={request.conversation_id})")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=GENERIC_ERROR.model_dump(),
        )

    # Explicitly Map: ChatTurnResult (Service) -> ChatResponse (API)
    return ChatResponse(
        conversation_id=turn.conversation_id,
        message=turn.message,
        metadata=ChatMetadata(
            workflow=turn.workflow,
            agents_used=turn.agents_used,
            topic=turn.topic,
            location=turn.location,
            latency_ms=turn.latency_ms,
        ),
        **turn.extras,
    )


@app.get("/health", response_model=HealthResponse)
async def handle_health(
    service: ChatService = Depends(get_chat_service)
):
    report = await service.health()
    body = HealthResponse(timestamp=datetime.now(timezone.utc), **report)
    return JSONResponse(
        status_code=status.HTTP_200_OK if report["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )


@app.get("/conversations/{conversation_id}", response_model=ConversationRead)
def get_conversation(
    conversation_id: str,
    service: ChatService = Depends(get_chat_service)
):
    state = service.get_conversation(conversation_id)
    if not state:
        raise HTTPException(status_code=404, detail="Conversation not found")

    # "dto" stands for Data Transfer Object.
    messages_dto = [
        ChatMessage(role=msg.role, content=msg.content, timestamp=msg.timestamp)
        for msg in state.messages
    ]
    return ConversationRead(
        conversation_id=state.conversation_id,
        messages=messages_dto,
        data=state.data,
        agents_used=state.get_agent_names(),
    )


@app.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation(
    conversation_id: str,
    service: ChatService = Depends(get_chat_service)
):
    """
    Deletes a conversation. Returns 204 No Content on success.
    """
    if not service.delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)
