"""Tool system — workflow node tools and the registry that builds them."""

from graphflow.agent.tools.base import WorkflowNodeTool
from graphflow.agent.tools.registry import (
    TOOL_FACTORIES,
    create_tool_from_node,
    create_tools_from_nodes,
    get_tool_catalog,
    resolve_tool,
)

__all__ = [
    "TOOL_FACTORIES",
    "WorkflowNodeTool",
    "create_tool_from_node",
    "create_tools_from_nodes",
    "get_tool_catalog",
    "resolve_tool",
]
