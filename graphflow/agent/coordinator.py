"""CoordinatorAgent — decides whether to re-run the executor or finish."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from graphflow.agent.messages import charge, message_text, results_to_json
from graphflow.agent.state import AgentState, Step
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_COORDINATOR_PROMPT = """\
You are a coordinator agent. Some steps failed during execution.
Analyze the failures and determine if they can be recovered or if the task is complete.

Failed steps: {failed_steps}

Respond with either "continue" to retry/modify approach or "finish" to complete."""


def parse_decision(text: str) -> Step:
    """``continue`` only when the model says so; anything else finishes."""
    return Step.CONTINUE if "continue" in text.lower() else Step.FINISH


class CoordinatorAgent:
    def __init__(self, model: ChatModel, config: Config | None = None) -> None:
        self.model = model
        self.config = config or Config()

    async def coordinate(self, state: AgentState) -> dict[str, Any]:
        """Finish without a model call when the latest batch has no failures."""
        failed = [r for r in state.get("execution_results") or [] if r.status == "failed"]
        if not failed:
            return {"current_step": Step.FINISH}

        messages = [
            SystemMessage(content=_COORDINATOR_PROMPT.format(failed_steps=results_to_json(failed))),
            HumanMessage(content="Should we continue or finish?"),
        ]
        response = await self.model.acomplete(messages)
        decision = parse_decision(message_text(response))
        logger.debug(f"Coordinator: {len(failed)} failed step(s) → {decision.value}")
        return {"current_step": decision, **charge(state, response, self.config.pricing)}
