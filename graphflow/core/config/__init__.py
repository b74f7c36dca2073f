"""Configuration module."""

from graphflow.core.config.loader import load_config, load_nodes
from graphflow.core.config.schema import Config

__all__ = ["Config", "load_config", "load_nodes"]
