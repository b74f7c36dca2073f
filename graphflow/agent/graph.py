"""LangGraph StateGraph — compile the planning workflow graph."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from graphflow.agent.coordinator import CoordinatorAgent
from graphflow.agent.executor import ExecutorAgent
from graphflow.agent.planner import PlannerAgent
from graphflow.agent.state import AgentState, Node, next_node
from graphflow.agent.summarizer import SummarizerAgent
from graphflow.agent.tools import WorkflowNodeTool
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel


def route_after_coordinator(state: AgentState) -> str:
    """Conditional edge: loop back to the executor or go summarize."""
    return next_node(state, Node.COORDINATOR).value


class WorkflowGraphManager:
    """
    Build and run the multi-agent graph.

    Graph flow:
        START → planner → executor → coordinator ─┬─ continue → executor
                                                  └─ finish → summarizer → END

    ``recursion_limit`` bounds the executor ⇄ coordinator loop; exceeding it
    raises ``GraphRecursionError`` from :meth:`invoke`.
    """

    def __init__(
        self,
        model: ChatModel,
        tools_registry: Mapping[str, WorkflowNodeTool],
        config: Config | None = None,
    ) -> None:
        self.config = config or Config()
        self.planner = PlannerAgent(model, self.config)
        self.executor = ExecutorAgent(tools_registry)
        self.coordinator = CoordinatorAgent(model, self.config)
        self.summarizer = SummarizerAgent(model, self.config)

    def compile(self) -> CompiledStateGraph:
        graph = StateGraph(AgentState)

        graph.add_node(Node.PLANNER.value, self.planner.plan)
        graph.add_node(Node.EXECUTOR.value, self.executor.execute)
        graph.add_node(Node.COORDINATOR.value, self.coordinator.coordinate)
        graph.add_node(Node.SUMMARIZER.value, self.summarizer.summarize)

        graph.add_edge(START, Node.PLANNER.value)
        graph.add_edge(Node.PLANNER.value, Node.EXECUTOR.value)
        graph.add_edge(Node.EXECUTOR.value, Node.COORDINATOR.value)
        graph.add_conditional_edges(
            Node.COORDINATOR.value,
            route_after_coordinator,
            {
                Node.EXECUTOR.value: Node.EXECUTOR.value,
                Node.SUMMARIZER.value: Node.SUMMARIZER.value,
            },
        )
        graph.add_edge(Node.SUMMARIZER.value, END)
        return graph.compile()

    async def invoke(
        self, state: dict[str, Any], recursion_limit: int | None = None
    ) -> dict[str, Any]:
        """Run the compiled graph to completion and return the final state."""
        limit = recursion_limit or self.config.workflow.recursion_limit
        return await self.compile().ainvoke(state, config={"recursion_limit": limit})
