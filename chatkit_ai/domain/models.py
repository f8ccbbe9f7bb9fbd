"""
Domain Layer - Static Definitions

This module defines the declarative shape of the system: which agents exist
(and which provider and static config each one gets) and which workflows
exist (entry point, node map, edge map). These are plain dataclasses read
from code-level configuration in data/; the execution layer turns them into
runnable objects.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Union

"""
NodeSpec describes what a node does:
- "SomeAgent": agent name resolved through the Registry
- {"agent": "SomeAgent"}: same, long form
- {"callable": fn} or fn: inline step called with the state
"""
NodeSpec = Union[str, Dict[str, Any], Callable[..., Any]]

"""
EdgeSpec describes where to go after a node:
- "next_node": fixed edge
- fn(state) -> "next_node": conditional edge
- ["next_node"]: single-candidate sequence, treated as a fixed edge
"""
EdgeSpec = Union[str, Callable[..., str], Sequence[str]]


@dataclass
class AgentDefinition:
    """
    Registration entry for one agent.

    Attributes:
        agent_class: The Agent subclass, or its dotted import path. A path is
            only imported when the agent is first requested.
        provider: Registered provider name. None = registry default.
        config: Static config handed to the agent constructor.
    """
    agent_class: Union[type, str]
    provider: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkflowDefinition:
    """
    One named workflow = one entry point + node map + edge map.

    Attributes:
        name: Unique identifier (also what requests select by).
        entry: Entry node name.
        nodes: Node name -> NodeSpec.
        edges: Node name -> EdgeSpec. Nodes without an edge end the run.
    """
    name: str
    entry: str
    nodes: Dict[str, NodeSpec] = field(default_factory=dict)
    edges: Dict[str, EdgeSpec] = field(default_factory=dict)
    description: str = ""
