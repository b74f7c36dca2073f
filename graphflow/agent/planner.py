"""PlannerAgent — turns the latest request into an ordered execution plan."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger
from pydantic import ValidationError

from graphflow.agent.messages import charge, extract_json_object, message_text
from graphflow.agent.models import ExecutionPlan, ExecutionStep
from graphflow.agent.state import AgentState, Step
from graphflow.agent.tools import WorkflowNodeTool, get_tool_catalog
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_PLANNER_PROMPT = """\
You are a workflow planner agent. Analyze the user's request and create an execution plan.

## Available Tools
{tool_catalog}

Break down the user's request into steps that can be executed using the available tools.
Use the exact tool names listed above.

## Output Format (JSON)
{{
  "steps": [{{"tool_name": "<tool name>", "parameters": {{}}}}],
  "reasoning": "<explanation of the plan>"
}}
"""


class PlannerAgent:
    """Single LLM call that produces an ExecutionPlan.

    An unparseable answer is not an error: it becomes an empty plan whose
    ``reasoning`` carries the raw text.
    """

    def __init__(self, model: ChatModel, config: Config | None = None) -> None:
        self.model = model
        self.config = config or Config()

    async def plan(self, state: AgentState) -> dict[str, Any]:
        user_input = message_text(state["messages"][-1])
        messages = [
            SystemMessage(content=self.build_system_prompt(state.get("available_tools") or [])),
            HumanMessage(content=f"Plan execution for: {user_input}"),
        ]
        logger.debug(f"Planner LLM call: request={user_input[:60]!r}")
        response = await self.model.acomplete(messages)

        plan = self.extract_plan(message_text(response))
        logger.debug(f"Plan: {len(plan.steps)} step(s)")
        return {
            "plan": plan,
            "current_step": Step.PLANNED,
            "messages": [response],
            **charge(state, response, self.config.pricing),
        }

    @staticmethod
    def build_system_prompt(tools: Sequence[WorkflowNodeTool]) -> str:
        catalog = get_tool_catalog(tools) or "(none)"
        return _PLANNER_PROMPT.format(tool_catalog=catalog)

    @staticmethod
    def extract_plan(text: str) -> ExecutionPlan:
        """Parse a plan from free text. Fallback to an empty plan."""
        data = extract_json_object(text)
        if data is None or "steps" not in data:
            logger.warning("PlannerAgent: no JSON plan in response, using empty plan")
            return ExecutionPlan(steps=[], reasoning=text)

        raw_steps = data.get("steps")
        steps: list[ExecutionStep] = []
        for raw in raw_steps if isinstance(raw_steps, list) else []:
            if isinstance(raw, dict) and raw.get("parameters") is None:
                raw = {**raw, "parameters": {}}
            try:
                steps.append(ExecutionStep.model_validate(raw))
            except ValidationError:
                logger.warning(f"PlannerAgent: dropping malformed step {raw!r}")

        reasoning = data.get("reasoning")
        return ExecutionPlan(steps=steps, reasoning=reasoning if isinstance(reasoning, str) else "")
