"""
Model backend access: configuration, loading, client and shared registry.
"""

from selfheal.llm.client import (
    CLOUD_CHAT_COMPLETIONS_URL,
    TRUNCATION_MARKER,
    ModelClient,
    build_prompt,
    clean_suggestion,
    truncate_markup,
)
from selfheal.llm.config import ModelConfig, Provider
from selfheal.llm.loader import (
    ConfigLoader,
    default_config_loader,
    load_model_config,
    make_config_loader,
    parse_config_document,
)
from selfheal.llm.registry import SharedClientRegistry

__all__ = [
    "CLOUD_CHAT_COMPLETIONS_URL",
    "TRUNCATION_MARKER",
    "ConfigLoader",
    "ModelClient",
    "ModelConfig",
    "Provider",
    "SharedClientRegistry",
    "build_prompt",
    "clean_suggestion",
    "default_config_loader",
    "load_model_config",
    "make_config_loader",
    "parse_config_document",
    "truncate_markup",
]
