"""Tests for graphflow.agent.structured — tagged-section parsing and classification."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from graphflow.agent.models import TokenUsage
from graphflow.agent.structured import (
    FALLBACK_RESPONSE,
    EnhancedConversationalAgent,
    classify_response_type,
    parse_structured_response,
)
from graphflow.agent.state import new_state
from graphflow.core.providers.base import ModelError

FULL = """<thinking>
User greets me.
</thinking>
<objectives>
Greet back; Offer help;
</objectives>
<response>
Hello! How can I help?
</response>
<summary>
Greeted the user.
</summary>
<confidence>
0.92
</confidence>
<metadata>
response_type: greeting
requires_followup: true
suggested_actions: Ask a question, Request a task
</metadata>"""


# ── Parser ────────────────────────────────────────────────


def test_parse_full_response():
    parsed = parse_structured_response(FULL, "hello")
    assert parsed.response == "Hello! How can I help?"
    assert parsed.thinking == "User greets me."
    assert parsed.objectives == ["Greet back", "Offer help"]
    assert parsed.summary == "Greeted the user."
    assert parsed.confidence == pytest.approx(0.92)
    assert parsed.metadata.response_type == "greeting"
    assert parsed.metadata.requires_followup is True
    assert parsed.metadata.suggested_actions == ["Ask a question", "Request a task"]


def test_parse_missing_response_uses_raw_text():
    raw = "Just a plain answer without tags."
    parsed = parse_structured_response(raw, "what is this")
    assert parsed.response == raw
    assert parsed.thinking is None
    assert parsed.objectives is None
    assert parsed.summary is None
    assert parsed.confidence is None
    assert parsed.metadata.response_type == "question"
    assert parsed.metadata.requires_followup is None


def test_parse_response_tag_only():
    parsed = parse_structured_response("<response>\n  Just the answer.  \n</response>", "I like turtles")
    assert parsed.response == "Just the answer."
    assert parsed.thinking is None
    assert parsed.objectives is None
    assert parsed.summary is None
    assert parsed.confidence is None
    assert parsed.metadata.response_type == "conversation"
    assert parsed.metadata.requires_followup is None
    assert parsed.metadata.suggested_actions is None


def test_parse_invalid_response_type_falls_back_to_classifier():
    raw = "<response>Sure</response><metadata>\nresponse_type: banana\n</metadata>"
    parsed = parse_structured_response(raw, "please write a poem")
    assert parsed.metadata.response_type == "task"
    assert parsed.metadata.requires_followup is False
    assert parsed.metadata.suggested_actions == []


def test_parse_bracketed_metadata():
    raw = (
        "<response>Hi</response><metadata>\nresponse_type: [question]\n"
        "requires_followup: [false]\nsuggested_actions: [Read docs, , Try again]\n</metadata>"
    )
    parsed = parse_structured_response(raw, "hm")
    assert parsed.metadata.response_type == "question"
    assert parsed.metadata.requires_followup is False
    assert parsed.metadata.suggested_actions == ["Read docs", "Try again"]


@pytest.mark.parametrize(
    "raw, expected",
    [("0.4", 0.4), ("85%", 0.85), ("1.7", 1.0), ("-0.2", 0.0), ("high", None)],
)
def test_parse_confidence(raw, expected):
    parsed = parse_structured_response(f"<response>x</response><confidence>{raw}</confidence>", "x")
    if expected is None:
        assert parsed.confidence is None
    else:
        assert parsed.confidence == pytest.approx(expected)


# ── Classifier ────────────────────────────────────────────


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello there", "greeting"),
        ("good morning!", "greeting"),
        ("What is LangGraph", "question"),
        ("it works, right?", "question"),
        ("Please summarize this", "task"),
        ("Can you draw a cat", "task"),
        ("history is fun", "greeting"),
        ("I like pizza", "conversation"),
        ("Whats the weather", "question"),
        ("Hows it going", "question"),
        ("Heyyy", "greeting"),
        ("Hiya friend", "greeting"),
        ("Whatever works", "question"),
        ("Hi there, how's it going?", "greeting"),
        ("What is the capital of France?", "question"),
        ("Please create a logo for me", "task"),
        ("I like turtles", "conversation"),
    ],
)
def test_classify_response_type(text, expected):
    assert classify_response_type(text) == expected


# ── Agent ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generate_structured_response(make_model, cfg):
    model = make_model(FULL)
    state = new_state([HumanMessage(content="hello")])

    structured = await EnhancedConversationalAgent(model, cfg).generate_structured_response(state)

    assert structured.response == "Hello! How can I help?"
    system, human = model.calls[0]
    assert "No previous conversation." in system.content
    assert "<metadata>" in system.content
    assert human.content == "hello"


@pytest.mark.asyncio
async def test_respond_reports_usage(make_model, cfg):
    model = make_model(FULL)
    state = new_state([HumanMessage(content="hi"), AIMessage(content="yo"), HumanMessage(content="hello")])

    structured, usage = await EnhancedConversationalAgent(model, cfg).respond(state)

    assert usage == TokenUsage(input=10, output=5)
    assert "User: hi\nAI: yo" in model.calls[0][0].content


@pytest.mark.asyncio
async def test_model_error_gives_fixed_fallback(make_model, cfg):
    model = make_model(ModelError("rate limited"))
    state = new_state([HumanMessage(content="hello")])

    structured, usage = await EnhancedConversationalAgent(model, cfg).respond(state)

    assert structured.response == FALLBACK_RESPONSE
    assert structured.confidence == 0.3
    assert structured.metadata.response_type == "error"
    assert structured.metadata.requires_followup is True
    assert "rate limited" in structured.thinking
    assert usage == TokenUsage()
