"""WorkflowNodeTool — runnable tool built from a workflow node declaration."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


@dataclass
class WorkflowNodeTool:
    """A tool the executor can run.

    ``args_schema`` documents the expected parameters; ``execute`` does not
    validate against it. ``execute`` may report ``token_usage`` /
    ``model_costs`` in its result dict but never touches agent state.
    """

    id: str
    type: str
    name: str
    description: str
    args_schema: type[BaseModel]
    execute: Callable[[dict[str, Any]], Awaitable[Any]]

    def parameters_json_schema(self) -> dict[str, Any]:
        return self.args_schema.model_json_schema()


def describe(base: str, data: dict[str, Any]) -> str:
    """Append the node's own description, if any."""
    extra = data.get("description") or ""
    return f"{base} {extra}".strip()


def require(params: dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None or value == "":
        raise ValueError(f"Missing required parameter: {key}")
    return value
