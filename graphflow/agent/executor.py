"""ExecutorAgent — runs plan steps sequentially, one result per step."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from graphflow.agent.messages import usage_from_result
from graphflow.agent.models import ExecutionResult, ExecutionStep, TokenUsage
from graphflow.agent.state import AgentState, Step
from graphflow.agent.tools import WorkflowNodeTool, resolve_tool

TOOL_NOT_FOUND = "Tool not found"


class ExecutorAgent:
    """Execute the current plan against the tool registry.

    Steps run strictly in plan order. A missing tool or a raising tool is
    recorded as a failed result and the remaining steps still run.
    """

    def __init__(self, tools_registry: Mapping[str, WorkflowNodeTool]) -> None:
        self.tools_registry = tools_registry

    async def execute(self, state: AgentState) -> dict[str, Any]:
        plan = state.get("plan")
        steps = plan.steps if plan else []

        token_usage = state.get("token_usage") or TokenUsage()
        model_costs = state.get("model_costs") or 0.0
        results: list[ExecutionResult] = []

        for step in steps:
            result = await self.execute_step(step)
            results.append(result)
            if result.status == "success":
                usage, cost = usage_from_result(result.result)
                token_usage = token_usage + usage
                model_costs += cost

        failed = sum(1 for r in results if r.status == "failed")
        logger.debug(f"Executed {len(results)} step(s), {failed} failed")
        return {
            "current_step": Step.EXECUTED,
            "execution_results": results,
            "execution_history": results,
            "token_usage": token_usage,
            "model_costs": model_costs,
        }

    async def execute_step(self, step: ExecutionStep) -> ExecutionResult:
        tool = resolve_tool(step.tool_name, self.tools_registry)
        if tool is None:
            logger.warning(f"Tool not found: {step.tool_name}")
            return ExecutionResult.failed(step, TOOL_NOT_FOUND)

        try:
            logger.debug(f"Executing tool: {tool.name}({step.parameters})")
            output = await tool.execute(dict(step.parameters))
        except Exception as e:
            logger.error(f"Tool error: {tool.name} → {e}")
            return ExecutionResult.failed(step, str(e) or type(e).__name__)
        return ExecutionResult.success(step, output)
