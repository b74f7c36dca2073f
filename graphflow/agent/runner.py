"""WorkflowExecutor — top-level orchestrator with conversational fallback."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from langchain_core.messages import BaseMessage
from loguru import logger

from graphflow.agent.graph import WorkflowGraphManager
from graphflow.agent.messages import last_ai_text, message_text
from graphflow.agent.models import (
    ExecutionResult,
    ExecutionStep,
    StructuredResponse,
    TokenUsage,
    WorkflowExecutionResult,
    WorkflowNode,
)
from graphflow.agent.state import new_state
from graphflow.agent.structured import EnhancedConversationalAgent
from graphflow.agent.tools import WorkflowNodeTool, create_tools_from_nodes
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

FALLBACK_TOOL_NAME = "enhanced_conversational_fallback"

NodeDeclaration = WorkflowNode | Mapping[str, Any]


class WorkflowExecutor:
    """
    Request-scoped orchestrator.

    Flow:
        1. Build the tool registry from node declarations
        2. Build the initial AgentState
        3. Run planner → executor ⇄ coordinator → summarizer
        4. Attach a best-effort structured view of the reply
        5. On any graph failure, answer through EnhancedConversationalAgent

    ``execute`` never raises.
    """

    def __init__(self, model: ChatModel | None = None, config: Config | None = None):
        self.config = config or Config()
        if model is None:
            from graphflow.core.providers.litellm import LiteLLMChatModel

            model = LiteLLMChatModel(self.config)
        self.model = model
        self.tools_registry: dict[str, WorkflowNodeTool] = {}

    def register_workflow_nodes(
        self, nodes: Iterable[NodeDeclaration]
    ) -> dict[str, WorkflowNodeTool]:
        """Build and keep a registry (for callers inspecting the tools)."""
        self.tools_registry = create_tools_from_nodes(nodes, self.model, self.config)
        return self.tools_registry

    async def execute(
        self,
        messages: Sequence[BaseMessage],
        workflow_id: str,
        session_id: str,
        user_id: str,
        nodes: Iterable[NodeDeclaration] | None = None,
    ) -> WorkflowExecutionResult:
        """Run the workflow for one request.

        Parameters
        ----------
        messages : sequence of BaseMessage
            Conversation so far; the last message is the request.
        workflow_id, session_id, user_id : str
            Identifiers carried in state.
        nodes : iterable of WorkflowNode or dict, optional
            Node declarations turned into tools for this run only.

        Returns
        -------
        WorkflowExecutionResult
            Always well formed; failures surface through
            ``structured_response.metadata`` and ``confidence``.
        """
        try:
            registry = create_tools_from_nodes(nodes or [], self.model, self.config)
            state = new_state(
                messages,
                session_id=session_id,
                user_id=user_id,
                workflow_id=workflow_id,
                available_tools=list(registry.values()),
                max_conversation_turns=self.config.workflow.max_conversation_turns,
            )
            manager = WorkflowGraphManager(self.model, registry, self.config)
            final_state = await manager.invoke(state)
        except Exception as e:
            logger.exception(f"Workflow {workflow_id} failed, using conversational fallback: {e}")
            return await self._fallback(messages, session_id, user_id, workflow_id, e)

        structured, usage = await self._structured_view(messages, session_id, user_id, workflow_id)
        token_usage = final_state["token_usage"] + usage
        model_costs = final_state["model_costs"] + self.config.pricing.token_cost(
            usage.input, usage.output
        )
        logger.info(
            f"Workflow {workflow_id} completed: {len(final_state['execution_history'])} step "
            f"result(s), tokens={token_usage.total}, cost={model_costs:.4f}"
        )
        return WorkflowExecutionResult(
            response=last_ai_text(final_state["messages"]),
            structured_response=structured,
            token_usage=token_usage,
            model_costs=model_costs,
            execution_history=final_state["execution_history"],
        )

    async def _structured_view(
        self,
        messages: Sequence[BaseMessage],
        session_id: str,
        user_id: str,
        workflow_id: str,
    ) -> tuple[StructuredResponse | None, TokenUsage]:
        """Observability only: never the source of the returned response."""
        try:
            state = new_state(messages, session_id, user_id, workflow_id)
            return await EnhancedConversationalAgent(self.model, self.config).respond(state)
        except Exception as e:
            logger.warning(f"Structured response unavailable for {workflow_id}: {e}")
            return None, TokenUsage()

    async def _fallback(
        self,
        messages: Sequence[BaseMessage],
        session_id: str,
        user_id: str,
        workflow_id: str,
        error: Exception,
    ) -> WorkflowExecutionResult:
        """Answer directly from a fresh state with no execution history."""
        state = new_state(messages, session_id, user_id, workflow_id)
        structured, usage = await EnhancedConversationalAgent(self.model, self.config).respond(state)

        if usage.total == 0:
            user_text = message_text(messages[-1]) if messages else ""
            usage = TokenUsage(
                input=_estimate_tokens(user_text),
                output=_estimate_tokens(structured.response),
            )
        entry = ExecutionResult.success(
            ExecutionStep(tool_name=FALLBACK_TOOL_NAME, parameters={"reason": str(error)}),
            {
                "response": structured.response,
                "response_type": structured.metadata.response_type,
                "confidence": structured.confidence,
            },
        )
        return WorkflowExecutionResult(
            response=structured.response,
            structured_response=structured,
            token_usage=usage,
            model_costs=self.config.pricing.token_cost(usage.input, usage.output),
            execution_history=[entry],
        )


def _estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 chars per token)."""
    return math.ceil(len(text) / 4)
