"""graphflow configuration schema — YAML + Pydantic + env override."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


# ════════════════════════════════════════════════════════════
# SUB-CONFIGS (nested BaseModel)
# ════════════════════════════════════════════════════════════


class ProviderConfig(BaseModel):
    """Single LLM provider."""

    api_key: str = ""
    api_base: str | None = None


class ProvidersConfig(BaseModel):
    """LLM providers (LiteLLM multi-provider)."""

    xai: ProviderConfig = Field(default_factory=ProviderConfig)
    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    anthropic: ProviderConfig = Field(default_factory=ProviderConfig)
    openrouter: ProviderConfig = Field(default_factory=ProviderConfig)


class ModelConfig(BaseModel):
    """Completion model shared by every agent and tool in one run."""

    name: str = "xai/grok-3-mini-latest"
    temperature: float = 0.7
    max_tokens: int = 4096
    api_base: str | None = None


class WorkflowConfig(BaseModel):
    """Graph execution limits and conversation defaults."""

    recursion_limit: int = 10
    max_conversation_turns: int = 50
    default_personality: str = "friendly and helpful"
    history_window: int = 5


# Model-name keyword → provider section; first match wins
PROVIDER_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("openrouter", "openrouter"),
    ("xai", "xai"),
    ("grok", "xai"),
    ("anthropic", "anthropic"),
    ("claude", "anthropic"),
    ("openai", "openai"),
    ("gpt", "openai"),
)

DEFAULT_API_BASES: dict[str, str] = {"openrouter": "https://openrouter.ai/api/v1"}


# Image model id → credit cost
IMAGE_MODEL_COSTS: dict[str, float] = {
    "fal-ai/recraft-v3": 6,
    "fal-ai/flux-lora": 6,
    "fal-ai/flux/schnell": 4,
    "fal-ai/flux-realism": 6,
    "fal-ai/flux-pro": 12,
    "fal-ai/flux/dev": 10,
    "fal-ai/stable-diffusion-v3-medium": 3,
    "fal-ai/aura-flow": 3,
    "fal-ai/kolors": 3,
    "fal-ai/stable-cascade": 5,
}


class PricingConfig(BaseModel):
    """Token and image pricing used for model_costs accounting."""

    input_per_1k: float = 0.002
    output_per_1k: float = 0.006
    image_model_costs: dict[str, float] = Field(
        default_factory=lambda: dict(IMAGE_MODEL_COSTS)
    )
    default_image_cost: float = 4

    def token_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost of one completion call."""
        return (
            input_tokens * self.input_per_1k + output_tokens * self.output_per_1k
        ) / 1000

    def image_cost(self, model: str) -> float:
        return self.image_model_costs.get(model, self.default_image_cost)


# Tools
class ImageToolConfig(BaseModel):
    endpoint: str = ""  # empty → placeholder result, no network call
    api_key: str = ""
    timeout: int = 60


class ToolsConfig(BaseModel):
    image: ImageToolConfig = Field(default_factory=ImageToolConfig)


# ════════════════════════════════════════════════════════════
# ROOT CONFIG (BaseSettings — env + .env support)
# ════════════════════════════════════════════════════════════


class Config(BaseSettings):
    """
    Root configuration.

    Priority: env vars > .env > YAML (init kwargs) > defaults

    Env override examples:
        GRAPHFLOW_MODEL__NAME=openai/gpt-4o-mini
        GRAPHFLOW_WORKFLOW__RECURSION_LIMIT=20
        GRAPHFLOW_PROVIDERS__XAI__API_KEY=xai-...
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPHFLOW_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model: ModelConfig = Field(default_factory=ModelConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; env and .env must still win over it
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    # ── Provider helpers ────────────────────────────────────

    def provider_for(self, model: str | None = None) -> tuple[str, ProviderConfig] | None:
        """Provider section a model name points at, by prefix or family keyword."""
        model_name = (model or self.model.name).lower()
        for keyword, name in PROVIDER_KEYWORDS:
            if keyword in model_name:
                return name, getattr(self.providers, name)
        return None

    def get_api_key(self, model: str | None = None) -> str | None:
        """API key for ``model``; any configured key when its provider has none."""
        match = self.provider_for(model)
        if match and match[1].api_key:
            return match[1].api_key
        keys = [p.api_key for _, p in self.providers if p.api_key]
        return keys[0] if keys else None

    def get_api_base(self, model: str | None = None) -> str | None:
        if self.model.api_base:
            return self.model.api_base
        match = self.provider_for(model)
        if match is None:
            return None
        name, provider = match
        return provider.api_base or DEFAULT_API_BASES.get(name)
