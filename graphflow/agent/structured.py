"""EnhancedConversationalAgent — tagged-section answers parsed into StructuredResponse.

The model is asked for six sections::

    <thinking> <objectives> <response> <summary> <confidence> <metadata>

:func:`parse_structured_response` decodes them without any network access.
Parsing is deliberately lenient: a missing tag leaves its field unset, and
text without a ``<response>`` tag is passed through whole.
"""

from __future__ import annotations

import re
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from graphflow.agent.messages import format_history, message_text, usage_from_message
from graphflow.agent.models import (
    RESPONSE_TYPES,
    ResponseMetadata,
    ResponseType,
    StructuredResponse,
    TokenUsage,
)
from graphflow.agent.state import AgentState
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

_STRUCTURED_PROMPT = """\
You are an AI assistant with a {personality} personality. {context}

IMPORTANT: You must respond in this EXACT structured format:

<thinking>
[Your internal reasoning and analysis of the user's request. Consider: what they want, why they might want it, what information you need to provide, and how to best help them.]
</thinking>

<objectives>
[List the specific objectives or goals you've identified from the user's request, separated by semicolons]
</objectives>

<response>
[Your actual response to the user - this is what they will see. Be natural, helpful, and conversational.]
</response>

<summary>
[Brief summary of what you accomplished or provided in this response]
</summary>

<confidence>
[Your confidence level in this response, as a number between 0 and 1]
</confidence>

<metadata>
response_type: [greeting|question|task|conversation|error]
requires_followup: [true|false]
suggested_actions: [comma-separated list of suggested follow-up actions, if any]
</metadata>

Previous conversation:
{history}

Remember to:
1. Be natural and conversational in your <response> section
2. Show your reasoning in the <thinking> section
3. Clearly identify what the user wants in <objectives>
4. Provide helpful follow-up suggestions when appropriate
5. Be honest about your confidence level"""

_TAGS = ("thinking", "objectives", "response", "summary", "confidence", "metadata")
_TAG_PATTERNS = {tag: re.compile(rf"<{tag}>(.*?)</{tag}>", re.DOTALL) for tag in _TAGS}

_RESPONSE_TYPE_RE = re.compile(r"response_type:\s*\[?\s*(\w+)", re.IGNORECASE)
_FOLLOWUP_RE = re.compile(r"requires_followup:\s*\[?\s*(true|false)", re.IGNORECASE)
_ACTIONS_RE = re.compile(r"suggested_actions:[ \t]*(.*)", re.IGNORECASE)
_NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+")

_GREETING_RE = re.compile(
    r"^(hi|hello|hey|howdy|sup|what's up|good morning|good afternoon|good evening)"
)
_QUESTION_RE = re.compile(r"^(what|how|why|where|when|who)")
_TASK_RE = re.compile(
    r"^(can you|could you|please|help me|i need|i want|create|make|generate|write|build)"
)

FALLBACK_RESPONSE = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Could you try rephrasing it?"
)


# ════════════════════════════════════════════════════════════
# PARSING (pure)
# ════════════════════════════════════════════════════════════


def classify_response_type(user_input: str) -> ResponseType:
    """Rule-based response type from the user's own words."""
    text = user_input.strip().lower()
    if _GREETING_RE.match(text):
        return "greeting"
    if "?" in text or _QUESTION_RE.match(text):
        return "question"
    if _TASK_RE.match(text):
        return "task"
    return "conversation"


def parse_structured_response(ai_output: str, user_input: str) -> StructuredResponse:
    """Decode tagged model output.

    Parameters
    ----------
    ai_output : str
        Raw model text.
    user_input : str
        The user's message; drives ``response_type`` when the model's
        metadata is missing or invalid.
    """
    try:
        sections = {
            tag: m.group(1) for tag, pattern in _TAG_PATTERNS.items()
            if (m := pattern.search(ai_output))
        }

        objectives = None
        if "objectives" in sections:
            objectives = [o.strip() for o in sections["objectives"].split(";") if o.strip()]

        return StructuredResponse(
            response=sections["response"].strip() if "response" in sections else ai_output,
            thinking=sections["thinking"].strip() if "thinking" in sections else None,
            objectives=objectives,
            summary=sections["summary"].strip() if "summary" in sections else None,
            confidence=_parse_confidence(sections.get("confidence")),
            metadata=_parse_metadata(sections.get("metadata"), user_input),
        )
    except Exception as e:
        logger.warning(f"Structured response parse failed: {e}")
        return StructuredResponse(
            response=ai_output,
            thinking="Failed to parse structured response",
            objectives=["Provide response to user"],
            summary="Provided unstructured response due to parsing error",
            confidence=0.5,
            metadata=ResponseMetadata(
                response_type=classify_response_type(user_input),
                requires_followup=False,
                suggested_actions=[],
            ),
        )


def _parse_confidence(raw: str | None) -> float | None:
    if raw is None:
        return None
    match = _NUMBER_RE.search(raw)
    if not match:
        return None
    value = float(match.group(0))
    if "%" in raw:
        value /= 100
    return min(1.0, max(0.0, value))


def _parse_metadata(raw: str | None, user_input: str) -> ResponseMetadata:
    if raw is None:
        return ResponseMetadata(response_type=classify_response_type(user_input))

    type_match = _RESPONSE_TYPE_RE.search(raw)
    response_type = type_match.group(1).lower() if type_match else None
    if response_type not in RESPONSE_TYPES:
        response_type = classify_response_type(user_input)

    followup_match = _FOLLOWUP_RE.search(raw)
    actions_match = _ACTIONS_RE.search(raw)
    actions: list[str] = []
    if actions_match:
        value = actions_match.group(1).strip().strip("[]")
        actions = [a.strip() for a in value.split(",") if a.strip()]

    return ResponseMetadata(
        response_type=response_type,
        requires_followup=followup_match.group(1).lower() == "true" if followup_match else False,
        suggested_actions=actions,
    )


def error_response(error: Exception | str) -> StructuredResponse:
    """Fixed reply used when the model call itself fails."""
    return StructuredResponse(
        response=FALLBACK_RESPONSE,
        thinking=f"Error occurred while processing: {error}",
        objectives=["Handle error gracefully", "Maintain conversation flow"],
        summary="Encountered an error and provided a fallback response",
        confidence=0.3,
        metadata=ResponseMetadata(
            response_type="error",
            requires_followup=True,
            suggested_actions=["Try rephrasing the request", "Check system status"],
        ),
    )


# ════════════════════════════════════════════════════════════
# AGENT
# ════════════════════════════════════════════════════════════


class EnhancedConversationalAgent:
    """Single-shot structured reply. Never raises."""

    def __init__(self, model: ChatModel, config: Config | None = None) -> None:
        self.model = model
        self.config = config or Config()

    async def generate_structured_response(self, state: AgentState) -> StructuredResponse:
        structured, _ = await self.respond(state)
        return structured

    async def respond(self, state: AgentState) -> tuple[StructuredResponse, TokenUsage]:
        """Structured reply plus the token usage of the call."""
        messages = state.get("messages") or []
        user_input = message_text(messages[-1]) if messages else ""
        try:
            system_prompt = self.build_prompt(
                state.get("personality") or self.config.workflow.default_personality,
                state.get("context") or "",
                self._history(messages),
            )
            response = await self.model.acomplete(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_input)]
            )
        except Exception as e:
            logger.error(f"Enhanced conversational agent error: {e}")
            return error_response(e), TokenUsage()

        return parse_structured_response(message_text(response), user_input), usage_from_message(response)

    @staticmethod
    def build_prompt(personality: str, context: str, history: str) -> str:
        return _STRUCTURED_PROMPT.format(personality=personality, context=context, history=history)

    def _history(self, messages: list[Any]) -> str:
        if len(messages) <= 1:
            return "No previous conversation."
        return format_history(
            messages, assistant_label="AI", window=self.config.workflow.history_window
        )
