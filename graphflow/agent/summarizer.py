"""SummarizerAgent — final human-facing answer from request + results."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from graphflow.agent.messages import charge, message_text, results_to_json
from graphflow.agent.state import AgentState, Step
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_SUMMARY_PROMPT = """\
You are a summarizer agent. Create a comprehensive response based on the execution results.

Original request: {original_request}
Execution results: {results}

Provide a helpful summary of what was accomplished."""


class SummarizerAgent:
    def __init__(self, model: ChatModel, config: Config | None = None) -> None:
        self.model = model
        self.config = config or Config()

    async def summarize(self, state: AgentState) -> dict[str, Any]:
        prompt = _SUMMARY_PROMPT.format(
            original_request=_original_request(state),
            results=results_to_json(state.get("execution_results") or []),
        )
        response = await self.model.acomplete(
            [SystemMessage(content=prompt), HumanMessage(content="Summarize the execution results")]
        )
        return {
            "current_step": Step.COMPLETED,
            "messages": [response],
            **charge(state, response, self.config.pricing),
        }


def _original_request(state: AgentState) -> str:
    """First user message of the run."""
    for msg in state["messages"]:
        if isinstance(msg, HumanMessage):
            return message_text(msg)
    return message_text(state["messages"][0]) if state["messages"] else ""
