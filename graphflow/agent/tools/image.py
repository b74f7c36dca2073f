"""Image generation tool — credit-costed image requests."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, Field

from graphflow.agent.models import WorkflowNode
from graphflow.agent.tools.base import WorkflowNodeTool, require
from graphflow.core.config.schema import Config
from graphflow.core.providers.base import ChatModel

DEFAULT_IMAGE_MODEL = "fal-ai/flux/schnell"
PLACEHOLDER_IMAGE_URL = "placeholder_generated_image_url"


class ImageArgs(BaseModel):
    prompt: str = Field(description="The prompt for image generation")
    style: str | None = Field(None, description="Style parameters")
    size: str | None = Field(None, description="Image size")


def make_image_tool(node: WorkflowNode, model: ChatModel, config: Config) -> WorkflowNodeTool:
    """Create an image tool.

    With ``tools.image.endpoint`` configured the request is POSTed there and
    the reply's ``image_url`` (or ``images[0].url``) is returned. Without an
    endpoint a placeholder URL is returned; the cost is charged either way.
    """
    image_model = node.data.get("model") or DEFAULT_IMAGE_MODEL
    image_cfg = config.tools.image

    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        prompt = require(params, "prompt")
        cost = config.pricing.image_cost(image_model)

        image_url = PLACEHOLDER_IMAGE_URL
        if image_cfg.endpoint:
            image_url = await _request_image(
                image_cfg.endpoint,
                image_cfg.api_key,
                image_cfg.timeout,
                {
                    "prompt": prompt,
                    "model": image_model,
                    "style": params.get("style"),
                    "size": params.get("size"),
                },
            )

        return {
            "image_url": image_url,
            "prompt": prompt,
            "model": image_model,
            "model_costs": cost,
            "status": "success",
        }

    model_label = node.data.get("model") or "default model"
    extra = node.data.get("description") or ""
    return WorkflowNodeTool(
        id=node.id,
        type=node.type,
        name=f"generate_image_{node.id}",
        description=f"Generate an image using {model_label}. {extra}".strip(),
        args_schema=ImageArgs,
        execute=execute,
    )


async def _request_image(
    endpoint: str, api_key: str, timeout: int, payload: dict[str, Any]
) -> str:
    headers = {"Authorization": f"Key {api_key}"} if api_key else {}
    async with httpx.AsyncClient(timeout=timeout) as client:
        resp = await client.post(endpoint, json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()

    url = data.get("image_url")
    if not url and data.get("images"):
        url = data["images"][0].get("url")
    if not url:
        raise ValueError("Image endpoint returned no image URL")
    logger.debug(f"Image generated: model={payload['model']} url={url[:80]}")
    return url
