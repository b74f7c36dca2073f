"""Tool registry — node declarations to an id-keyed map of runnable tools."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger

from graphflow.agent.models import WorkflowNode
from graphflow.agent.tools.base import WorkflowNodeTool
from graphflow.agent.tools.chat import make_chat_tool
from graphflow.agent.tools.image import make_image_tool
from graphflow.agent.tools.llm import make_llm_tool
from graphflow.agent.tools.text_analysis import make_text_analysis_tool
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

ToolFactory = Callable[[WorkflowNode, ChatModel, Config], WorkflowNodeTool]

TOOL_FACTORIES: dict[str, ToolFactory] = {
    "image_generator": make_image_tool,
    "text_analyzer": make_text_analysis_tool,
    "llm": make_llm_tool,
    "chat": make_chat_tool,
}

# Longest first so "llm_process_" is tried before any shorter overlap
_VERB_PREFIXES = ("generate_image_", "analyze_text_", "llm_process_", "chat_")


def create_tool_from_node(
    node: WorkflowNode | Mapping[str, Any],
    model: ChatModel,
    config: Config | None = None,
) -> WorkflowNodeTool | None:
    """Build one tool, or None when the node type is not supported."""
    if not isinstance(node, WorkflowNode):
        node = WorkflowNode.model_validate(node)
    factory = TOOL_FACTORIES.get(node.type)
    if factory is None:
        logger.debug(f"Skipping node {node.id!r}: unsupported type {node.type!r}")
        return None
    return factory(node, model, config or Config())


def create_tools_from_nodes(
    nodes: Iterable[WorkflowNode | Mapping[str, Any]],
    model: ChatModel,
    config: Config | None = None,
) -> dict[str, WorkflowNodeTool]:
    """Build the registry for one run.

    Parameters
    ----------
    nodes : iterable of WorkflowNode or dict
        Node declarations ``{id, type, data}``. Ids must be unique.
    model : ChatModel
        Model shared by the LLM-backed tools.

    Returns
    -------
    dict[str, WorkflowNodeTool]
        Node id to tool. Unsupported node types are left out.
    """
    config = config or Config()
    registry: dict[str, WorkflowNodeTool] = {}
    for node in nodes:
        tool = create_tool_from_node(node, model, config)
        if tool is not None:
            registry[tool.id] = tool
    return registry


def resolve_tool(
    tool_name: str, registry: Mapping[str, WorkflowNodeTool]
) -> WorkflowNodeTool | None:
    """Find the tool a plan step refers to.

    Tried in order: exact tool name, known verb prefix stripped, bare id,
    and finally everything up to the last underscore stripped.
    """
    if not tool_name:
        return None
    for tool in registry.values():
        if tool.name == tool_name:
            return tool
    for prefix in _VERB_PREFIXES:
        if tool_name.startswith(prefix) and tool_name[len(prefix):] in registry:
            return registry[tool_name[len(prefix):]]
    if tool_name in registry:
        return registry[tool_name]
    return registry.get(tool_name.rsplit("_", 1)[-1])


def get_tool_catalog(tools: Iterable[WorkflowNodeTool]) -> str:
    """Human-readable tool list for planner prompts."""
    lines = []
    for t in tools:
        desc = (t.description or "").strip()
        if len(desc) > 300:
            desc = desc[:300] + "..."
        lines.append(f"- {t.name}: {desc}")
    return "\n".join(lines)
