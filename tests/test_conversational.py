"""Tests for graphflow.agent.conversational."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from graphflow.agent.conversational import ConversationalAgent
from graphflow.agent.models import TokenUsage
from graphflow.agent.state import Step, new_state


@pytest.mark.asyncio
async def test_converse_updates_turn_and_response(make_model, cfg):
    model = make_model("I'm great, thanks for asking!")
    state = new_state(
        [HumanMessage(content="hi"), AIMessage(content="hello"), HumanMessage(content="how are you")],
        personality="witty",
        conversation_turn=2,
    )

    result = await ConversationalAgent(model, cfg).converse(state)

    assert result["current_step"] == Step.RESPONDED
    assert result["last_response"] == "I'm great, thanks for asking!"
    assert result["conversation_turn"] == 3
    assert result["messages"][0].content == "I'm great, thanks for asking!"
    assert result["token_usage"] == TokenUsage(input=10, output=5)

    system, human = model.calls[0]
    assert "witty personality" in system.content
    assert "Conversation History:\nUser: hi\nAssistant: hello" in system.content
    assert "how are you" not in system.content
    assert human.content == "how are you"


@pytest.mark.asyncio
async def test_converse_defaults_and_context(make_model, cfg):
    model = make_model("Hello!")
    state = new_state([HumanMessage(content="hi")], context="User is a chef")

    await ConversationalAgent(model, cfg).converse(state)

    system = model.calls[0][0].content
    assert "friendly and helpful personality" in system
    assert "Additional Context: User is a chef" in system
    assert "Conversation History" not in system


def test_should_continue_conversation(make_model, cfg):
    agent = ConversationalAgent(make_model(), cfg)
    assert agent.should_continue_conversation({"conversation_turn": 49, "max_conversation_turns": 50})
    assert not agent.should_continue_conversation({"conversation_turn": 50, "max_conversation_turns": 50})
    assert agent.should_continue_conversation({"conversation_turn": 0})
    assert not agent.should_continue_conversation({"conversation_turn": 50})


def test_should_continue_zero_limit(make_model, cfg):
    agent = ConversationalAgent(make_model(), cfg)
    assert not agent.should_continue_conversation({"conversation_turn": 0, "max_conversation_turns": 0})
