"""
Execution Layer - Registry and Workflow Orchestration

Defines the Registry (provider/agent lookup) and the Workflow (directed
state machine over agent nodes).
"""

from chatkit_ai.execution.registry import Registry
from chatkit_ai.execution.schemas.graph import (
    END,
    AgentRef,
    ConditionalEdge,
    FixedEdge,
    InlineStep,
)
from chatkit_ai.execution.workflow import Workflow


__all__ = [
    "END",
    "AgentRef",
    "ConditionalEdge",
    "FixedEdge",
    "InlineStep",
    "Registry",
    "Workflow",
]
