"""LLM tool — free-form text processing with a node-level prompt."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from graphflow.agent.messages import message_text, usage_from_message
from graphflow.agent.models import WorkflowNode
from graphflow.agent.tools.base import WorkflowNodeTool, describe
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel


class LLMArgs(BaseModel):
    input_text: str = Field(description="Input text to process")
    instructions: str | None = Field(None, description="Additional instructions")


def make_llm_tool(node: WorkflowNode, model: ChatModel, config: Config) -> WorkflowNodeTool:
    """Create an LLM tool. ``data.prompt`` wins over call-time parameters."""

    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        prompt = node.data.get("prompt") or params.get("instructions") or params.get("input_text")
        if not prompt:
            raise ValueError("Missing required parameter: input_text")
        system_prompt = node.data.get("system_prompt") or "You are a helpful assistant."

        response = await model.acomplete(
            [SystemMessage(content=system_prompt), HumanMessage(content=str(prompt))]
        )
        usage = usage_from_message(response)
        return {
            "response": message_text(response),
            "prompt": prompt,
            "token_usage": {"input": usage.input, "output": usage.output},
            "model_costs": config.pricing.token_cost(usage.input, usage.output),
            "status": "success",
        }

    return WorkflowNodeTool(
        id=node.id,
        type=node.type,
        name=f"llm_process_{node.id}",
        description=describe("Process text using LLM.", node.data),
        args_schema=LLMArgs,
        execute=execute,
    )
