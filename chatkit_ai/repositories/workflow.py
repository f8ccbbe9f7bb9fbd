from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..data.workflows import WORKFLOWS
from ..domain.models import WorkflowDefinition
from ..exceptions import WorkflowError


# The Interface
class WorkflowRepository(ABC):
    """
    Defines how the application accesses Workflow definitions.
    This allows us change how definitions are sourced later
    without changing the ChatService code.
    """

    @abstractmethod
    def get_workflow(self, workflow_name: str) -> WorkflowDefinition:
        """
        Retrieves a workflow definition by name.
        Raises WorkflowError if not found.
        """
        pass

    @abstractmethod
    def list_workflows(self) -> List[str]:
        pass


class StaticWorkflowRepository(WorkflowRepository):
    """
    Get workflows from the definitions in data/workflows.py.
    """

    def __init__(self, workflows: Optional[Dict[str, WorkflowDefinition]] = None):
        # Index for O(1) lookup
        self._index: Dict[str, WorkflowDefinition] = dict(WORKFLOWS if workflows is None else workflows)

    def get_workflow(self, workflow_name: str) -> WorkflowDefinition:
        if workflow_name not in self._index:
            raise WorkflowError(f"Workflow '{workflow_name}' not found.")
        return self._index[workflow_name]

    def list_workflows(self) -> List[str]:
        return list(self._index.keys())
