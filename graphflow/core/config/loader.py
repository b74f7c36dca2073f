"""Loaders for the config file and workflow node declarations (YAML or JSON)."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from graphflow.core.config.schema import Config


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Build the effective Config.

    File lookup:
        1. ``config_path`` argument
        2. ``GRAPHFLOW_CONFIG`` env variable
        3. ``./config.yaml``

    Env vars (``GRAPHFLOW_…``) still override whatever the file sets.
    """
    path = _config_path(config_path)
    data = (_read_document(path) or {}) if path and path.exists() else {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a mapping: {path}")
    if path and data:
        logger.debug(f"Config loaded from {path}")
    return Config(**data)


def load_nodes(path: str | Path) -> list[dict[str, Any]]:
    """Read workflow node declarations.

    The document is either a list of ``{id, type, data}`` mappings or a
    mapping with a ``nodes`` key holding that list.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Node file not found: {path}")
    data = _read_document(path)
    if isinstance(data, dict):
        data = data.get("nodes")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Node declarations must be a list: {path}")
    return data


def _config_path(config_path: str | Path | None) -> Path | None:
    if config_path:
        return Path(config_path)
    if env := os.environ.get("GRAPHFLOW_CONFIG"):
        return Path(env)
    default = Path("config.yaml")
    return default if default.exists() else None


def _read_document(path: Path) -> Any:
    with open(path) as f:
        if path.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f)
