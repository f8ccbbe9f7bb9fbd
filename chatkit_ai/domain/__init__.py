"""
Domain Layer - Static Definitions

Declarative agent and workflow definitions consumed by the Registry and the
Workflow builder.
"""

from chatkit_ai.domain.models import (
    AgentDefinition,
    EdgeSpec,
    NodeSpec,
    WorkflowDefinition,
)

__all__ = [
    "AgentDefinition",
    "EdgeSpec",
    "NodeSpec",
    "WorkflowDefinition",
]
