"""Message helpers — content flattening, JSON extraction, usage, history."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from graphflow.agent.models import ExecutionResult, TokenUsage

if TYPE_CHECKING:
    from graphflow.core.config.schema import PricingConfig


def extract_message_content(content: Any) -> str:
    """Flatten message content (str or list of parts) into plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
        return "".join(parts)
    return json.dumps(content, default=str)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced ``{...}`` block in ``text`` that parses as JSON.

    Braces inside JSON strings are ignored while matching, so prose and
    markdown fences around the object are tolerated.
    """
    start = text.find("{")
    while start != -1:
        end = _match_brace(text, start)
        data = None
        if end is not None:
            try:
                data = json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                pass
        if isinstance(data, dict):
            return data
        start = text.find("{", start + 1)
    return None


def _match_brace(text: str, start: int) -> int | None:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def usage_from_message(message: Any) -> TokenUsage:
    """Token usage reported on an AIMessage (zero when absent, never negative)."""
    meta = getattr(message, "usage_metadata", None)
    if meta:
        return TokenUsage(
            input=max(0, int(meta.get("input_tokens") or 0)),
            output=max(0, int(meta.get("output_tokens") or 0)),
        )
    usage = (getattr(message, "response_metadata", None) or {}).get("usage") or {}
    return TokenUsage(
        input=max(0, int(usage.get("prompt_tokens") or 0)),
        output=max(0, int(usage.get("completion_tokens") or 0)),
    )


def usage_from_result(result: Any) -> tuple[TokenUsage, float]:
    """Token usage and cost a tool declared in its result payload."""
    if not isinstance(result, dict):
        return TokenUsage(), 0.0
    raw = result.get("token_usage") or {}
    if isinstance(raw, TokenUsage):
        usage = raw
    elif isinstance(raw, dict):
        usage = TokenUsage(
            input=max(0, int(raw.get("input") or 0)),
            output=max(0, int(raw.get("output") or 0)),
        )
    else:
        usage = TokenUsage()
    # Totals never decrease
    cost = result.get("model_costs") or 0
    return usage, max(0.0, float(cost)) if isinstance(cost, (int, float)) else 0.0


def message_text(message: BaseMessage) -> str:
    return extract_message_content(message.content)


def format_history(
    messages: Sequence[BaseMessage],
    assistant_label: str = "Assistant",
    window: int | None = None,
) -> str:
    """Render prior turns (all but the current message) as ``Role: text`` lines."""
    prior = list(messages[:-1])
    if window is not None:
        prior = prior[-window:] if window > 0 else []
    lines = []
    for msg in prior:
        role = "User" if isinstance(msg, HumanMessage) else assistant_label
        lines.append(f"{role}: {message_text(msg)}")
    return "\n".join(lines)


def results_to_json(results: Sequence[ExecutionResult]) -> str:
    return json.dumps([r.model_dump() for r in results], default=str)


def last_ai_text(messages: Sequence[BaseMessage]) -> str:
    """Text of the last message, preferring the final AIMessage."""
    for msg in reversed(messages):
        if isinstance(msg, AIMessage):
            return message_text(msg)
    return message_text(messages[-1]) if messages else ""


def charge(
    state: dict[str, Any], message: Any, pricing: PricingConfig
) -> dict[str, Any]:
    """State update adding one completion's usage and cost to the totals."""
    usage = usage_from_message(message)
    return {
        "token_usage": (state.get("token_usage") or TokenUsage()) + usage,
        "model_costs": (state.get("model_costs") or 0.0)
        + pricing.token_cost(usage.input, usage.output),
    }
