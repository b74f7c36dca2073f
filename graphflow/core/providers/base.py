"""Base chat model — the single capability every agent and tool depends on."""

from __future__ import annotations

import abc
from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage


class ModelError(RuntimeError):
    """Raised when a completion call fails at the provider."""


class ChatModel(abc.ABC):
    """Abstract completion capability.

    Implementations return an AIMessage with the text in ``content`` and,
    when the provider reports it, ``usage_metadata`` holding
    ``input_tokens`` / ``output_tokens``.
    """

    @abc.abstractmethod
    async def acomplete(self, messages: Sequence[BaseMessage]) -> AIMessage:
        """Send a chat completion request and return an AIMessage."""
        ...
