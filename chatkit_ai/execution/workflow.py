"""
Workflow - Agent Orchestration State Machine

The Workflow is a directed graph of named nodes. Each node runs an agent (or
an inline step) against the ConversationState, then an edge picks the next
node. A run starts at the entry point and stops at the END marker.

Per step:
1. Look up the node action. Unknown node = WorkflowError.
2. Run it and append one trace entry.
3. Follow the edge: none -> END, fixed -> its target, conditional -> router(state).
4. The next node must be a string.
5. Count the step; once max_iterations steps ran without reaching END,
   fail with WorkflowError. This guards misconfigured cycles.

Structural failures (unknown node, unregistered agent, runaway graph) stop
the run immediately. Agents absorb their own provider failures, so anything
that escapes a node here is fatal and propagates to the caller.
"""

import inspect
import logging
import time
from collections.abc import Sequence
from typing import Any, Callable, Dict, Optional, Union

from ..domain.models import EdgeSpec, NodeSpec, WorkflowDefinition
from ..exceptions import WorkflowError
from ..state.models import ConversationState, utcnow
from .registry import Registry
from .schemas.graph import (
    END,
    AgentRef,
    ConditionalEdge,
    Edge,
    FixedEdge,
    InlineStep,
    NodeAction,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


class Workflow:
    def __init__(
        self,
        name: str,
        registry: Registry,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        description: str = "",
    ):
        self.name = name
        self.registry = registry
        self.max_iterations = max_iterations
        self.description = description
        self.entry_point: Optional[str] = None
        self.nodes: Dict[str, NodeAction] = {}
        self.edges: Dict[str, Edge] = {}

    # ==========================================================================
    # Construction
    # ==========================================================================

    def add_node(self, name: str, action: Union[str, Callable[..., Any], NodeAction]) -> "Workflow":
        """An agent name, a callable(state), or an explicit AgentRef/InlineStep."""
        if name == END:
            raise WorkflowError(f"'{END}' is reserved and cannot be a node")
        self.nodes[name] = _to_action(name, action)
        return self

    def add_edge(self, from_node: str, to_node: str) -> "Workflow":
        if not isinstance(to_node, str):
            raise WorkflowError(f"Edge from '{from_node}' must target a node name")
        self.edges[from_node] = FixedEdge(target=to_node)
        return self

    def add_conditional_edge(
        self, from_node: str, router: Callable[[ConversationState], str]
    ) -> "Workflow":
        if not callable(router):
            raise WorkflowError(f"Conditional edge from '{from_node}' needs a routing function")
        self.edges[from_node] = ConditionalEdge(router=router)
        return self

    def set_entry_point(self, node_name: str) -> "Workflow":
        self.entry_point = node_name
        return self

    def get_nodes(self) -> Dict[str, NodeAction]:
        return dict(self.nodes)

    def get_edges(self) -> Dict[str, Edge]:
        return dict(self.edges)

    def get_name(self) -> str:
        return self.name

    def validate(self) -> None:
        """
        Static checks: the entry point is a node and fixed edges point at known
        nodes (or END). Conditional targets are only known at run time.
        """
        if self.entry_point is None:
            raise WorkflowError(f"Workflow '{self.name}' has no entry point")
        if self.entry_point not in self.nodes:
            raise WorkflowError(
                f"Entry point '{self.entry_point}' not found in workflow '{self.name}'"
            )
        for source, edge in self.edges.items():
            if source not in self.nodes:
                raise WorkflowError(f"Edge source '{source}' is not a node of '{self.name}'")
            if isinstance(edge, FixedEdge) and edge.target != END and edge.target not in self.nodes:
                raise WorkflowError(
                    f"Edge '{source}' -> '{edge.target}' targets an unknown node"
                )

    @classmethod
    def from_config(
        cls,
        definition: Union[WorkflowDefinition, Dict[str, Any]],
        registry: Registry,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> "Workflow":
        """Builds and validates a workflow from a WorkflowDefinition (or its dict form)."""
        if isinstance(definition, dict):
            definition = WorkflowDefinition(
                name=definition.get("name", "unnamed_workflow"),
                entry=definition.get("entry"),
                nodes=definition.get("nodes", {}),
                edges=definition.get("edges", {}),
                description=definition.get("description", ""),
            )

        workflow = cls(
            definition.name,
            registry,
            max_iterations=max_iterations,
            description=definition.description,
        )
        if definition.entry:
            workflow.set_entry_point(definition.entry)

        for node_name, node_spec in definition.nodes.items():
            workflow.add_node(node_name, _node_spec_to_action(node_name, node_spec))

        for from_node, edge_spec in definition.edges.items():
            _add_edge_spec(workflow, from_node, edge_spec)

        workflow.validate()
        return workflow

    def to_config(self) -> Dict[str, Any]:
        """Serializable view: callables are reported by type only."""
        nodes: Dict[str, Any] = {}
        for node_name, action in self.nodes.items():
            match action:
                case AgentRef(agent_name=agent_name):
                    nodes[node_name] = {"agent": agent_name}
                case InlineStep():
                    nodes[node_name] = {"type": "callable"}

        edges: Dict[str, Any] = {}
        for source, edge in self.edges.items():
            match edge:
                case FixedEdge(target=target):
                    edges[source] = target
                case ConditionalEdge():
                    edges[source] = {"type": "conditional"}

        return {
            "name": self.name,
            "description": self.description,
            "entry": self.entry_point,
            "nodes": nodes,
            "edges": edges,
        }

    # ==========================================================================
    # Execution
    # ==========================================================================

    async def run(
        self, state: ConversationState, max_iterations: Optional[int] = None
    ) -> ConversationState:
        if self.entry_point is None:
            raise WorkflowError(f"Workflow '{self.name}' has no entry point")

        limit = max_iterations if max_iterations is not None else self.max_iterations
        current_node = self.entry_point
        iterations = 0

        state.reset_trace()
        state.set_metadata("workflow_name", self.name)
        state.set_metadata("workflow_started_at", utcnow().isoformat())
        logger.info(f"Workflow '{self.name}' started for conversation {state.conversation_id}")

        while current_node != END:
            action = self.nodes.get(current_node)
            if action is None:
                raise WorkflowError(f"Node '{current_node}' not found in workflow '{self.name}'")

            try:
                state = await self._execute_node(current_node, action, state)
            except Exception as e:
                logger.error(f"Workflow '{self.name}': node '{current_node}' failed: {e}")
                raise

            current_node = self._next_node(current_node, state)
            iterations += 1

            if current_node != END and iterations >= limit:
                raise WorkflowError(
                    f"Workflow '{self.name}' exceeded maximum iterations ({limit})"
                )

        state.set_metadata("workflow_completed_at", utcnow().isoformat())
        state.set_metadata("workflow_iterations", iterations)
        logger.info(f"Workflow '{self.name}' completed in {iterations} iterations")
        return state

    async def _execute_node(
        self, node_name: str, action: NodeAction, state: ConversationState
    ) -> ConversationState:
        started = time.perf_counter()
        logger.debug(f"Workflow '{self.name}': executing node '{node_name}'")

        match action:
            case AgentRef(agent_name=agent_name):
                agent = self.registry.get_agent(agent_name)
                if agent is None:
                    raise WorkflowError(f"Agent '{agent_name}' not found in registry")
                state = await agent.execute(state)
                state.add_trace(
                    agent.name,
                    node=node_name,
                    latency_ms=_elapsed_ms(started),
                )
            case InlineStep(func=func):
                result = func(state)
                if inspect.isawaitable(result):
                    result = await result
                if result is not None:
                    if not isinstance(result, ConversationState):
                        raise WorkflowError(
                            f"Inline step '{node_name}' returned {type(result).__name__}, "
                            "expected ConversationState"
                        )
                    state = result
                state.add_trace(
                    node_name,
                    node=node_name,
                    latency_ms=_elapsed_ms(started),
                    metadata={"type": "callable"},
                )

        logger.debug(f"Workflow '{self.name}': node '{node_name}' took {_elapsed_ms(started)}ms")
        return state

    def _next_node(self, current_node: str, state: ConversationState) -> str:
        edge = self.edges.get(current_node)

        match edge:
            case None:
                next_node = END
            case FixedEdge(target=target):
                next_node = target
            case ConditionalEdge(router=router):
                next_node = router(state)
                logger.info(f"Workflow '{self.name}': conditional routing {current_node} -> {next_node}")
            case _:
                raise WorkflowError(f"Unknown edge type after '{current_node}': {edge!r}")

        if not isinstance(next_node, str):
            raise WorkflowError(
                f"Invalid next node after '{current_node}': expected str, got {type(next_node).__name__}"
            )
        return next_node


# ==============================================================================
# Helpers
# ==============================================================================

def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _to_action(node_name: str, action: Any) -> NodeAction:
    if isinstance(action, (AgentRef, InlineStep)):
        return action
    if isinstance(action, str):
        return AgentRef(agent_name=action)
    if callable(action):
        return InlineStep(func=action)
    raise WorkflowError(f"Invalid action for node '{node_name}': {type(action).__name__}")


def _node_spec_to_action(node_name: str, spec: NodeSpec) -> NodeAction:
    if isinstance(spec, dict):
        if "agent" in spec:
            return AgentRef(agent_name=spec["agent"])
        if "callable" in spec:
            return InlineStep(func=spec["callable"])
        raise WorkflowError(f"Node '{node_name}' needs an 'agent' or 'callable' entry")
    return _to_action(node_name, spec)


def _add_edge_spec(workflow: Workflow, from_node: str, spec: EdgeSpec) -> None:
    if isinstance(spec, str):
        workflow.add_edge(from_node, spec)
    elif callable(spec):
        workflow.add_conditional_edge(from_node, spec)
    elif isinstance(spec, Sequence):
        # Multi-destination edges are not supported; a single candidate is a fixed edge.
        if len(spec) != 1:
            raise WorkflowError(
                f"Edge from '{from_node}' lists {len(spec)} destinations; exactly one is supported"
            )
        workflow.add_edge(from_node, spec[0])
    else:
        raise WorkflowError(f"Invalid edge from '{from_node}': {type(spec).__name__}")
