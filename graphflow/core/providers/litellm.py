"""LiteLLM provider — ChatModel over ``litellm.acompletion``."""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import Any

import litellm
from langchain_core.messages import AIMessage, BaseMessage, ToolMessage
from loguru import logger

from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel, ModelError

litellm.suppress_debug_info = True

# Provider section → env var LiteLLM reads the key from
_KEY_ENV_VARS = {
    "xai": "XAI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

# LangChain message type → OpenAI chat role
_ROLES = {"system": "system", "human": "user", "ai": "assistant", "tool": "tool"}


class LiteLLMChatModel(ChatModel):
    """Production ChatModel.

    Parameters
    ----------
    config : Config
        ``config.model`` gives the model name and sampling settings;
        ``config.providers`` the API keys.
    model : str, optional
        Overrides ``config.model.name``.

    Provider failures surface as :class:`ModelError`.
    """

    def __init__(self, config: Config, model: str | None = None) -> None:
        self.config = config
        self.model = model or config.model.name
        self._export_keys(config)

    async def acomplete(self, messages: Sequence[BaseMessage]) -> AIMessage:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [to_openai_message(m) for m in messages],
            "temperature": self.config.model.temperature,
            "max_tokens": self.config.model.max_tokens,
        }
        if api_base := self.config.get_api_base(self.model):
            kwargs["api_base"] = api_base

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.error(f"LLM error ({self.model}): {e}")
            raise ModelError(str(e)) from e
        return self._to_ai_message(response)

    @staticmethod
    def _to_ai_message(response: Any) -> AIMessage:
        """Text plus usage from a LiteLLM ModelResponse."""
        choice = response.choices[0]
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        return AIMessage(
            content=choice.message.content or "",
            response_metadata={"finish_reason": choice.finish_reason or "stop"},
            usage_metadata={
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            },
        )

    @staticmethod
    def _export_keys(config: Config) -> None:
        """LiteLLM reads provider keys from the environment; never overwrite one."""
        for name, env_var in _KEY_ENV_VARS.items():
            key = getattr(config.providers, name).api_key
            if key:
                os.environ.setdefault(env_var, key)


def to_openai_message(msg: BaseMessage) -> dict[str, Any]:
    data: dict[str, Any] = {"role": _ROLES.get(msg.type, "user"), "content": msg.content}
    if isinstance(msg, ToolMessage):
        data["tool_call_id"] = msg.tool_call_id
    return data
