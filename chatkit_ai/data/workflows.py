"""
Declarative workflow definitions.

Each entry is one entry point + node map + edge map. Node values are agent
names registered in data/agents.py. Routing functions live here, next to the
graphs that use them.
"""

from typing import Dict

from chatkit_ai.domain.models import WorkflowDefinition
from chatkit_ai.execution.schemas.graph import END
from chatkit_ai.state.models import ConversationState


def check_blocked(state: ConversationState) -> str:
    """Stop right after guardrails when the message was blocked."""
    return END if state.get("blocked", False) else "classify"


# ==============================================================================
# WORKFLOW DEFINITIONS
# ==============================================================================

# guardrails -> check_blocked -> classify -> compose -> END
newcomer_assistant = WorkflowDefinition(
    name="newcomer-assistant",
    description="Main workflow for assisting newcomers to Canada",
    entry="guardrails",
    nodes={
        "guardrails": "GuardrailsAgent",
        "classify": "ClassifierAgent",
        "compose": "ComposerAgent",
    },
    edges={
        "guardrails": check_blocked,
        "classify": "compose",
        "compose": END,
    },
)


WORKFLOWS: Dict[str, WorkflowDefinition] = {
    newcomer_assistant.name: newcomer_assistant,
}
