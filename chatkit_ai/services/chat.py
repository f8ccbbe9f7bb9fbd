"""
Chat Service - Application Orchestration Layer

This service is the entry point for all conversation operations. It loads (or
creates) the conversation state, appends the user's message, runs the named
workflow and saves the state exactly once afterwards.

Structural errors (WorkflowError, ConfigurationError) propagate to the API
layer, which answers with a generic failure. Requests for the same
conversation id are serialized; different ids run fully in parallel.
"""

import asyncio
import logging
import time
import uuid
import weakref
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..execution.registry import Registry
from ..execution.workflow import DEFAULT_MAX_ITERATIONS, Workflow
from ..repositories.state import DEFAULT_TTL_SECONDS, StateRepository
from ..repositories.workflow import WorkflowRepository
from ..state.models import ConversationState

logger = logging.getLogger(__name__)

# Request context keys copied into state data.
CONTEXT_KEYS = ("location", "user_email", "newcomer_profile")

# State data keys passed through to the response when present.
OPTIONAL_RESPONSE_KEYS = ("suggestions", "offers", "events")


class ChatTurnResult(BaseModel):
    conversation_id: str
    message: str
    workflow: str
    agents_used: List[str] = Field(default_factory=list)
    topic: Optional[str] = None
    location: Optional[str] = None
    latency_ms: float = 0.0
    extras: Dict[str, Any] = Field(default_factory=dict)


class ChatService:
    def __init__(
        self,
        registry: Registry,
        state_repository: StateRepository,
        workflow_repository: WorkflowRepository,
        default_workflow: str,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        state_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self.registry = registry
        self.state_repo = state_repository
        self.workflow_repo = workflow_repository
        self.default_workflow = default_workflow
        self.max_iterations = max_iterations
        self.state_ttl_seconds = state_ttl_seconds
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get_conversation(self, conversation_id: str) -> Optional[ConversationState]:
        return self.state_repo.load(conversation_id)

    def delete_conversation(self, conversation_id: str) -> bool:
        return self.state_repo.delete(conversation_id)

    async def process_message(
        self,
        message: str,
        conversation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        workflow_name: Optional[str] = None,
    ) -> ChatTurnResult:
        """
        The Core Loop:
        1. Load or create state
        2. Append the user message and seed context
        3. Run the workflow
        4. Save state
        5. Return the turn result
        """
        started = time.perf_counter()
        conversation_id = conversation_id or self._generate_conversation_id()
        workflow_name = workflow_name or self.default_workflow

        async with self._lock_for(conversation_id):
            # 1. Load State
            state = self.state_repo.load_or_create(conversation_id)

            # 2. Seed
            state.add_message("user", message)
            for key in CONTEXT_KEYS:
                if context and context.get(key) is not None:
                    state.set(key, context[key])

            # 3. Run the Workflow
            definition = self.workflow_repo.get_workflow(workflow_name)
            workflow = Workflow.from_config(definition, self.registry, self.max_iterations)
            state = await workflow.run(state)

            # 4. Save State
            self.state_repo.save(state, self.state_ttl_seconds)

        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"Conversation {conversation_id}: '{workflow_name}' answered in {latency_ms}ms "
            f"via {state.get_agent_names()}"
        )

        # 5. Construct the Result
        return ChatTurnResult(
            conversation_id=conversation_id,
            message=state.get_last_assistant_message(),
            workflow=workflow_name,
            agents_used=state.get_agent_names(),
            topic=state.get("topic"),
            location=state.get("location"),
            latency_ms=latency_ms,
            extras={key: state.get(key) for key in OPTIONAL_RESPONSE_KEYS if state.has(key)},
        )

    async def health(self) -> Dict[str, Any]:
        """Provider reachability plus the registered agent names."""
        providers = {
            name: await provider.health()
            for name, provider in self.registry.get_providers().items()
        }
        return {
            "status": "healthy" if all(providers.values()) else "unhealthy",
            "providers": providers,
            "agents": {name: "registered" for name in self.registry.get_agent_names()},
        }

    def _lock_for(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    @staticmethod
    def _generate_conversation_id() -> str:
        return f"conv_{uuid.uuid4().hex}"
