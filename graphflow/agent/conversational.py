"""ConversationalAgent — standalone multi-turn chat outside the planning graph."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from graphflow.agent.messages import charge, format_history, message_text
from graphflow.agent.state import AgentState, Step
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_CONVERSATION_PROMPT = """\
You are a conversational AI assistant with a {personality} personality.
Your goal is to have natural, engaging conversations with users.

Conversation Guidelines:
- Maintain a consistent personality throughout the conversation
- Reference previous parts of the conversation when relevant
- Ask thoughtful follow-up questions to keep the conversation flowing
- Show genuine interest in what the user is sharing
- Provide helpful information and insights when appropriate
- Be empathetic and supportive when the user shares personal experiences
- Keep responses conversational and avoid being overly formal
- Match the user's energy level and communication style"""


class ConversationalAgent:
    """One model call per turn; callers drive the loop.

    Use :meth:`should_continue_conversation` as the loop guard.
    """

    def __init__(self, model: ChatModel, config: Config | None = None) -> None:
        self.model = model
        self.config = config or Config()

    async def converse(self, state: AgentState) -> dict[str, Any]:
        messages = state["messages"]
        personality = state.get("personality") or self.config.workflow.default_personality
        system_prompt = self.build_prompt(
            personality, state.get("context") or "", format_history(messages)
        )

        response = await self.model.acomplete(
            [SystemMessage(content=system_prompt), HumanMessage(content=message_text(messages[-1]))]
        )
        return {
            "current_step": Step.RESPONDED,
            "messages": [response],
            "last_response": message_text(response),
            "conversation_turn": (state.get("conversation_turn") or 0) + 1,
            **charge(state, response, self.config.pricing),
        }

    @staticmethod
    def build_prompt(personality: str, context: str, history: str) -> str:
        prompt = _CONVERSATION_PROMPT.format(personality=personality)
        if context:
            prompt += f"\n\nAdditional Context: {context}"
        if history:
            prompt += f"\n\nConversation History:\n{history}"
        return prompt + "\n\nRemember to be natural and human-like in your response."

    def should_continue_conversation(self, state: AgentState) -> bool:
        max_turns = state.get("max_conversation_turns")
        if max_turns is None:
            max_turns = self.config.workflow.max_conversation_turns
        return (state.get("conversation_turn") or 0) < max_turns
