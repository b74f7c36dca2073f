"""AgentState — LangGraph state definition and the workflow state machine."""

from __future__ import annotations

import operator
from collections.abc import Sequence
from enum import Enum
from typing import Annotated, Any

from langchain_core.messages import BaseMessage
from langgraph.graph import MessagesState

from graphflow.agent.models import ExecutionPlan, ExecutionResult, TokenUsage
from graphflow.agent.tools.base import WorkflowNodeTool


class Step(str, Enum):
    """Label each agent leaves in ``current_step``."""

    START = "start"
    PLANNED = "planned"
    EXECUTED = "executed"
    CONTINUE = "continue"
    FINISH = "finish"
    COMPLETED = "completed"
    RESPONDED = "responded"


class Node(str, Enum):
    """Nodes of the planning graph."""

    PLANNER = "planner"
    EXECUTOR = "executor"
    COORDINATOR = "coordinator"
    SUMMARIZER = "summarizer"
    END = "__end__"


class AgentState(MessagesState):
    """
    Extends MessagesState (messages: Annotated[list[BaseMessage], add_messages]).

    Merge rule per node update: ``messages`` and ``execution_history``
    concatenate, every other key is last-write-wins.
    """

    workflow_id: str | None
    session_id: str
    user_id: str
    current_step: Step

    # planner / executor
    plan: ExecutionPlan | None
    execution_results: list[ExecutionResult]
    execution_history: Annotated[list[ExecutionResult], operator.add]
    available_tools: list[WorkflowNodeTool]

    # conversation
    personality: str
    context: str
    last_response: str
    conversation_turn: int
    max_conversation_turns: int

    # accounting
    token_usage: TokenUsage
    model_costs: float


def new_state(
    messages: Sequence[BaseMessage],
    session_id: str = "",
    user_id: str = "",
    workflow_id: str | None = None,
    available_tools: Sequence[WorkflowNodeTool] = (),
    **overrides: Any,
) -> dict[str, Any]:
    """Fresh state for one run; ``overrides`` set conversation fields etc."""
    state: dict[str, Any] = {
        "messages": list(messages),
        "workflow_id": workflow_id,
        "session_id": session_id,
        "user_id": user_id,
        "current_step": Step.START,
        "plan": None,
        "execution_results": [],
        "execution_history": [],
        "available_tools": list(available_tools),
        "personality": "",
        "context": "",
        "last_response": "",
        "conversation_turn": 0,
        "max_conversation_turns": 50,
        "token_usage": TokenUsage(),
        "model_costs": 0.0,
    }
    state.update(overrides)
    return state


def next_node(state: dict[str, Any], last_node: Node) -> Node:
    """Pure transition function of the planning graph.

    planner → executor → coordinator; coordinator loops back to the
    executor only on an explicit ``continue`` decision, otherwise the
    summarizer runs and the graph ends.
    """
    if last_node is Node.PLANNER:
        return Node.EXECUTOR
    if last_node is Node.EXECUTOR:
        return Node.COORDINATOR
    if last_node is Node.COORDINATOR:
        if state.get("current_step") == Step.CONTINUE:
            return Node.EXECUTOR
        return Node.SUMMARIZER
    if last_node is Node.SUMMARIZER:
        return Node.END
    raise ValueError(f"No transition out of {last_node.value!r}")
