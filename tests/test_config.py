"""Tests for graphflow.core.config."""

import pytest
import yaml

from graphflow.core.config import Config, load_config, load_nodes


def test_defaults():
    cfg = Config()
    assert cfg.model.name == "xai/grok-3-mini-latest"
    assert cfg.workflow.recursion_limit == 10
    assert cfg.workflow.max_conversation_turns == 50
    assert cfg.workflow.default_personality == "friendly and helpful"
    assert cfg.tools.image.endpoint == ""


def test_from_dict():
    cfg = Config(
        model={"name": "openai/gpt-4o-mini"},
        providers={"anthropic": {"api_key": "sk-test"}},
        workflow={"recursion_limit": 25},
    )
    assert cfg.model.name == "openai/gpt-4o-mini"
    assert cfg.providers.anthropic.api_key == "sk-test"
    assert cfg.workflow.recursion_limit == 25


def test_get_api_key():
    cfg = Config(providers={"anthropic": {"api_key": "sk-ant"}})
    assert cfg.get_api_key("anthropic/claude-sonnet") == "sk-ant"
    # Falls back to the first configured key
    assert cfg.get_api_key("unknown/model") == "sk-ant"


def test_get_api_base_openrouter_default():
    cfg = Config()
    assert cfg.get_api_base("openrouter/some-model") == "https://openrouter.ai/api/v1"
    assert cfg.get_api_base("xai/grok-3") is None


def test_env_override(monkeypatch):
    monkeypatch.setenv("GRAPHFLOW_WORKFLOW__RECURSION_LIMIT", "20")
    cfg = Config()
    assert cfg.workflow.recursion_limit == 20
    assert cfg.workflow.max_conversation_turns == 50


# ── Pricing ───────────────────────────────────────────────


def test_token_cost():
    cfg = Config()
    assert cfg.pricing.token_cost(1000, 1000) == pytest.approx(0.008)
    assert cfg.pricing.token_cost(0, 0) == 0


def test_image_cost():
    cfg = Config()
    assert cfg.pricing.image_cost("fal-ai/flux-pro") == 12
    assert cfg.pricing.image_cost("fal-ai/flux/schnell") == 4
    assert cfg.pricing.image_cost("someone/unknown-model") == 4


# ── Loader ────────────────────────────────────────────────


def test_load_yaml(tmp_path):
    f = tmp_path / "config.yaml"
    f.write_text(yaml.dump({"model": {"name": "openai/gpt-4o"}}))
    cfg = load_config(f)
    assert cfg.model.name == "openai/gpt-4o"


def test_load_missing(tmp_path):
    cfg = load_config(tmp_path / "nope.yaml")
    assert cfg.model.name == "xai/grok-3-mini-latest"


def test_load_from_env_path(tmp_path, monkeypatch):
    f = tmp_path / "custom.yaml"
    f.write_text(yaml.dump({"workflow": {"max_conversation_turns": 3}}))
    monkeypatch.setenv("GRAPHFLOW_CONFIG", str(f))
    cfg = load_config()
    assert cfg.workflow.max_conversation_turns == 3


def test_load_empty_yaml(tmp_path):
    f = tmp_path / "config.yaml"
    f.write_text("")
    assert load_config(f).workflow.recursion_limit == 10


# ── Node declarations ─────────────────────────────────────


def test_load_nodes_yaml_mapping(tmp_path):
    f = tmp_path / "nodes.yaml"
    f.write_text(yaml.dump({"nodes": [{"id": "c1", "type": "chat", "data": {}}]}))
    assert load_nodes(f) == [{"id": "c1", "type": "chat", "data": {}}]


def test_load_nodes_json_list(tmp_path):
    f = tmp_path / "nodes.json"
    f.write_text('[{"id": "l1", "type": "llm"}]')
    assert load_nodes(f) == [{"id": "l1", "type": "llm"}]


def test_load_nodes_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_nodes(tmp_path / "nope.yaml")


def test_load_nodes_not_a_list(tmp_path):
    f = tmp_path / "nodes.yaml"
    f.write_text(yaml.dump({"nodes": "chat"}))
    with pytest.raises(ValueError):
        load_nodes(f)


def test_env_overrides_yaml(tmp_path, monkeypatch):
    f = tmp_path / "config.yaml"
    f.write_text(yaml.dump({"workflow": {"recursion_limit": 5, "max_conversation_turns": 7}}))
    monkeypatch.setenv("GRAPHFLOW_WORKFLOW__RECURSION_LIMIT", "20")

    cfg = load_config(f)

    assert cfg.workflow.recursion_limit == 20
    # Keys without an env var still come from the file
    assert cfg.workflow.max_conversation_turns == 7
