"""Tests for the LiteLLM ChatModel."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from graphflow.core.config import Config
from graphflow.core.providers.base import ModelError
from graphflow.core.providers.litellm import LiteLLMChatModel, to_openai_message

_PATCH_ACOMPLETION = "graphflow.core.providers.litellm.litellm.acompletion"


def _make_response(content="hello", prompt_tokens=10, completion_tokens=5):
    msg = SimpleNamespace(content=content)
    choice = SimpleNamespace(finish_reason="stop", message=msg)
    usage = SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return SimpleNamespace(choices=[choice], usage=usage)


# ── _to_ai_message ────────────────────────────────────────


def test_to_ai_message_basic():
    msg = LiteLLMChatModel._to_ai_message(_make_response("Hi there"))
    assert isinstance(msg, AIMessage)
    assert msg.content == "Hi there"
    assert msg.usage_metadata["input_tokens"] == 10
    assert msg.usage_metadata["output_tokens"] == 5
    assert msg.response_metadata["finish_reason"] == "stop"


def test_to_ai_message_no_content_no_usage():
    response = SimpleNamespace(
        choices=[SimpleNamespace(finish_reason=None, message=SimpleNamespace(content=None))],
        usage=None,
    )
    msg = LiteLLMChatModel._to_ai_message(response)
    assert msg.content == ""
    assert msg.usage_metadata["total_tokens"] == 0


# ── acomplete ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_acomplete_passes_model_settings():
    cfg = Config(model={"name": "openai/gpt-4o-mini", "temperature": 0.2, "max_tokens": 256})
    llm = LiteLLMChatModel(cfg)

    with patch(_PATCH_ACOMPLETION, new=AsyncMock(return_value=_make_response("ok"))) as mock_call:
        msg = await llm.acomplete([SystemMessage(content="sys"), HumanMessage(content="hi")])

    assert msg.content == "ok"
    kwargs = mock_call.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 256
    assert kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
    ]
    assert "api_base" not in kwargs


@pytest.mark.asyncio
async def test_acomplete_openrouter_api_base():
    llm = LiteLLMChatModel(Config(), model="openrouter/some/model")

    with patch(_PATCH_ACOMPLETION, new=AsyncMock(return_value=_make_response())) as mock_call:
        await llm.acomplete([HumanMessage(content="hi")])

    assert mock_call.call_args.kwargs["api_base"] == "https://openrouter.ai/api/v1"


@pytest.mark.asyncio
async def test_acomplete_raises_model_error():
    llm = LiteLLMChatModel(Config())

    with patch(_PATCH_ACOMPLETION, new=AsyncMock(side_effect=RuntimeError("429 rate limit"))):
        with pytest.raises(ModelError, match="429 rate limit"):
            await llm.acomplete([HumanMessage(content="hi")])


def test_export_keys_sets_env():
    with patch.dict(os.environ):
        os.environ.pop("XAI_API_KEY", None)
        LiteLLMChatModel(Config(providers={"xai": {"api_key": "xai-test"}}))
        assert os.environ["XAI_API_KEY"] == "xai-test"


# ── Message conversion ────────────────────────────────────


def test_to_openai_message_roles():
    assert to_openai_message(AIMessage(content="a")) == {"role": "assistant", "content": "a"}
    assert to_openai_message(ToolMessage(content="r", tool_call_id="1")) == {
        "role": "tool",
        "tool_call_id": "1",
        "content": "r",
    }
