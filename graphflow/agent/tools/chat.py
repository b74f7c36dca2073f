"""Chat tool — conversational reply with a configurable personality."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from graphflow.agent.messages import message_text, usage_from_message
from graphflow.agent.models import WorkflowNode
from graphflow.agent.tools.base import WorkflowNodeTool, describe, require
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_CHAT_PROMPT = """\
You are a conversational AI assistant with a {personality} personality.
Provide natural, engaging, and helpful responses to user messages.

Guidelines:
- Be conversational and human-like in your responses
- Show empathy and understanding when appropriate
- Ask follow-up questions to keep the conversation flowing
- Provide helpful information when requested
- Match the tone and energy of the user's message
- Be concise but thorough in your responses"""


class ChatArgs(BaseModel):
    user_message: str = Field(description="The user's message to respond to")
    context: str | None = Field(None, description="Additional context for the conversation")
    personality: str | None = Field(None, description="Personality style for the response")


def build_chat_prompt(personality: str, context: str) -> str:
    prompt = _CHAT_PROMPT.format(personality=personality)
    return f"{prompt}\n\nAdditional context: {context}" if context else prompt


def make_chat_tool(node: WorkflowNode, model: ChatModel, config: Config) -> WorkflowNodeTool:
    """Create a chat tool closed over the node data and model."""

    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        user_message = require(params, "user_message")
        personality = (
            params.get("personality")
            or node.data.get("personality")
            or config.workflow.default_personality
        )
        context = params.get("context") or node.data.get("context") or ""

        response = await model.acomplete(
            [
                SystemMessage(content=build_chat_prompt(personality, context)),
                HumanMessage(content=str(user_message)),
            ]
        )
        usage = usage_from_message(response)
        return {
            "response": message_text(response),
            "personality_used": personality,
            "context_used": context,
            "token_usage": {"input": usage.input, "output": usage.output},
            "model_costs": config.pricing.token_cost(usage.input, usage.output),
        }

    return WorkflowNodeTool(
        id=node.id,
        type=node.type,
        name=f"chat_{node.id}",
        description=describe(
            "Handle conversational interactions and provide human-like responses.",
            node.data,
        ),
        args_schema=ChatArgs,
        execute=execute,
    )
