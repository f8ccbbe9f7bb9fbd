"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the core Singleton services (Registry, Repositories).
2. Wiring them together (e.g., injecting the Registry and Repositories into the ChatService).
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

By consolidating construction logic here, we keep the API layer (main.py)
clean and strictly focused on routing, while allowing for easy dependency
overrides during testing.
"""

from functools import lru_cache
from fastapi import Depends

from ..bootstrap import build_registry
from ..config import settings
from ..execution.registry import Registry
from ..repositories.state import StateRepository, InMemoryStateRepository, SQLStateRepository
from ..repositories.workflow import WorkflowRepository, StaticWorkflowRepository
from ..services.chat import ChatService

from ..infrastructure.database.connection import get_engine, init_db


# The Registry (Singleton)
@lru_cache()
def get_registry() -> Registry:
    return build_registry(settings)


# Workflow Repository (Singleton)
@lru_cache()
def get_workflow_repository() -> WorkflowRepository:
    return StaticWorkflowRepository()


# State Repository (Singleton)
# Note: In-memory storage must be a singleton so data persists across requests!
@lru_cache()
def get_state_repository() -> StateRepository:
    if settings.DATABASE_URL:
        engine = get_engine()
        init_db(engine)
        return SQLStateRepository(engine)
    return InMemoryStateRepository()


# The Chat Service (Singleton Service)
@lru_cache()
def get_chat_service(
    registry: Registry = Depends(get_registry),
    state_repo: StateRepository = Depends(get_state_repository),
    workflow_repo: WorkflowRepository = Depends(get_workflow_repository),
) -> ChatService:
    """
    Injects all necessary components into the ChatService.
    """
    return ChatService(
        registry=registry,
        state_repository=state_repo,
        workflow_repository=workflow_repo,
        default_workflow=settings.DEFAULT_WORKFLOW,
        max_iterations=settings.WORKFLOW_MAX_ITERATIONS,
        state_ttl_seconds=settings.STATE_TTL_SECONDS,
    )
