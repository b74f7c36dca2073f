"""Text analysis tool — sentiment, themes, word count, readability."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from graphflow.agent.messages import message_text, usage_from_message
from graphflow.agent.models import WorkflowNode
from graphflow.agent.tools.base import WorkflowNodeTool, describe, require
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_ANALYSIS_PROMPT = """\
Analyze the following text: {text}

Analysis type: {analysis_type}

Provide a detailed analysis including:
- Sentiment
- Key themes
- Word count
- Readability score"""


class TextAnalysisArgs(BaseModel):
    text: str = Field(description="Text to analyze")
    analysis_type: str | None = Field(None, description="Type of analysis to perform")


def make_text_analysis_tool(
    node: WorkflowNode, model: ChatModel, config: Config
) -> WorkflowNodeTool:
    """Create a text analysis tool closed over the model."""

    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        text = require(params, "text")
        analysis_type = params.get("analysis_type")
        prompt = _ANALYSIS_PROMPT.format(text=text, analysis_type=analysis_type or "general")

        response = await model.acomplete(
            [
                SystemMessage(content="You are a text analysis expert."),
                HumanMessage(content=prompt),
            ]
        )
        usage = usage_from_message(response)
        return {
            "analysis": message_text(response),
            "input_text": text,
            "analysis_type": analysis_type,
            "token_usage": {"input": usage.input, "output": usage.output},
            "model_costs": config.pricing.token_cost(usage.input, usage.output),
            "status": "success",
        }

    return WorkflowNodeTool(
        id=node.id,
        type=node.type,
        name=f"analyze_text_{node.id}",
        description=describe("Analyze text content.", node.data),
        args_schema=TextAnalysisArgs,
        execute=execute,
    )
