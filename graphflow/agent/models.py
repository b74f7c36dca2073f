"""Pydantic data models — plans, step results, structured responses."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


# ════════════════════════════════════════════════════════════
# ACCOUNTING
# ════════════════════════════════════════════════════════════


class TokenUsage(BaseModel):
    """Token counters for one run. Only ever grows."""

    input: int = 0
    output: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(input=self.input + other.input, output=self.output + other.output)

    @property
    def total(self) -> int:
        return self.input + self.output


# ════════════════════════════════════════════════════════════
# PLAN / EXECUTION
# ════════════════════════════════════════════════════════════


class ExecutionStep(BaseModel):
    """A single tool invocation requested by the planner."""

    tool_name: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class ExecutionPlan(BaseModel):
    steps: list[ExecutionStep] = Field(default_factory=list)
    reasoning: str = ""


class ExecutionResult(BaseModel):
    """Outcome of one step: ``result`` on success, ``error`` on failure.

    ``status`` is the discriminant. A tool that returns ``None`` still
    succeeded, so a success carries its return value as-is (``None``
    included) and never an error; a failure always carries an error and
    never a result.
    """

    step: ExecutionStep
    result: Any = None
    error: str | None = None
    status: Literal["success", "failed"]

    @model_validator(mode="after")
    def _result_or_error(self) -> ExecutionResult:
        if self.status == "success" and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if self.status == "failed" and (self.error is None or self.result is not None):
            raise ValueError("failed result needs an error and no result")
        return self

    @classmethod
    def success(cls, step: ExecutionStep, result: Any) -> ExecutionResult:
        return cls(step=step, result=result, status="success")

    @classmethod
    def failed(cls, step: ExecutionStep, error: str) -> ExecutionResult:
        return cls(step=step, error=error, status="failed")


# ════════════════════════════════════════════════════════════
# STRUCTURED RESPONSE
# ════════════════════════════════════════════════════════════


ResponseType = Literal["greeting", "question", "task", "conversation", "error"]
RESPONSE_TYPES: frozenset[str] = frozenset(
    ("greeting", "question", "task", "conversation", "error")
)


class ResponseMetadata(BaseModel):
    response_type: ResponseType
    requires_followup: bool | None = None
    suggested_actions: list[str] | None = None


class StructuredResponse(BaseModel):
    """Tagged-section decomposition of a model answer."""

    response: str
    thinking: str | None = None
    objectives: list[str] | None = None
    summary: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    metadata: ResponseMetadata


# ════════════════════════════════════════════════════════════
# WORKFLOW I/O
# ════════════════════════════════════════════════════════════


class WorkflowNode(BaseModel):
    """Caller-declared capability, converted into a tool by the registry."""

    id: str
    type: str
    data: dict[str, Any] = Field(default_factory=dict)


class WorkflowExecutionResult(BaseModel):
    response: str
    structured_response: StructuredResponse | None = None
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    model_costs: float = 0.0
    execution_history: list[ExecutionResult] = Field(default_factory=list)
