"""Shared fixtures: a scripted ChatModel fake and node declarations."""

from collections.abc import Sequence

import pytest
from langchain_core.messages import AIMessage, BaseMessage

from graphflow.core.config import Config
from graphflow.core.providers.base import ChatModel


def ai(text: str, input_tokens: int = 10, output_tokens: int = 5) -> AIMessage:
    return AIMessage(
        content=text,
        usage_metadata={
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        },
    )


class ScriptedModel(ChatModel):
    """Replays scripted replies in order; the last one repeats once exhausted.

    A script item may be a str (→ AIMessage with 10/5 tokens), an AIMessage,
    or an exception instance to raise.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls: list[list[BaseMessage]] = []

    async def acomplete(self, messages: Sequence[BaseMessage]) -> AIMessage:
        self.calls.append(list(messages))
        index = min(len(self.calls), len(self.script)) - 1
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item if isinstance(item, AIMessage) else ai(item)


@pytest.fixture
def cfg():
    return Config()


@pytest.fixture
def make_model():
    return ScriptedModel


@pytest.fixture
def nodes():
    return [
        {"id": "img1", "type": "image_generator", "data": {"model": "fal-ai/flux-pro"}},
        {"id": "txt1", "type": "text_analyzer", "data": {}},
        {"id": "llm1", "type": "llm", "data": {"description": "Summarizes input."}},
        {"id": "c1", "type": "chat", "data": {"personality": "witty"}},
        {"id": "x1", "type": "webhook", "data": {}},
    ]
