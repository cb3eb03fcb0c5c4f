"""
Configuration loading for the model backend.

Reads an optional JSON or YAML settings document, applies environment
overrides and hands the merged mapping to ``ModelConfig.from_mapping``.
A missing or malformed document is never fatal: the loader logs it and
continues with environment values and defaults.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from dotenv import load_dotenv

from selfheal.exceptions import ConfigurationInvalidError
from selfheal.llm.config import ModelConfig

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = "appsettings.json"

# Top-level keys that may wrap the model settings
SECTION_KEYS: frozenset[str] = frozenset({"llm", "selfheal", "selfhealing"})

ENV_OVERRIDES: dict[str, str] = {
    "SELFHEAL_PROVIDER": "Provider",
    "SELFHEAL_API_KEY": "ApiKey",
    "SELFHEAL_BASE_URL": "BaseUrl",
    "SELFHEAL_MODEL": "Model",
    "SELFHEAL_TEMPERATURE": "Temperature",
    "SELFHEAL_MAX_TOKENS": "MaxTokens",
}

ConfigLoader = Callable[[], ModelConfig]


def parse_config_document(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse a settings document into the mapping holding model settings.

    YAML is tried for ``.yaml``/``.yml`` sources, JSON otherwise. When the
    root mapping has a section key such as ``Llm`` whose value is a
    mapping, that section is returned instead of the root.

    Raises:
        ConfigurationInvalidError: If the text does not parse or the root
            is not a mapping.
    """
    if not text.strip():
        return {}

    try:
        if source.endswith((".yaml", ".yml")):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationInvalidError(source, str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationInvalidError(source, f"expected a mapping, got {type(data).__name__}")

    for key, value in data.items():
        if str(key).lower() in SECTION_KEYS and isinstance(value, dict):
            return value
    return data


def _env_overrides(env: Mapping[str, str]) -> dict[str, str]:
    return {
        doc_key: env[var]
        for var, doc_key in ENV_OVERRIDES.items()
        if env.get(var)
    }


def load_model_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ModelConfig:
    """
    Load the model configuration from file and environment.

    Args:
        path: Settings document path (default ``appsettings.json``)
        env: Environment mapping (default ``os.environ``)

    Returns:
        ModelConfig with defaults for anything not supplied
    """
    env = os.environ if env is None else env
    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_PATH)
    log = logger.bind(component="config_loader", path=str(config_path))

    document: dict[str, Any] = {}
    if config_path.is_file():
        try:
            document = parse_config_document(
                config_path.read_text(encoding="utf-8-sig"), source=str(config_path)
            )
        except ConfigurationInvalidError as e:
            log.warning("Configuration document invalid, using defaults", error=e.reason)
        except OSError as e:
            log.warning("Configuration document unreadable, using defaults", error=str(e))
    elif path is not None:
        log.debug("Configuration document not found, using defaults")

    # Drop keys the environment overrides, whatever their spelling in the file
    overrides = _env_overrides(env)
    overridden = {key.lower() for key in overrides}
    merged: dict[str, Any] = {
        key: value for key, value in document.items()
        if str(key).lower().replace("_", "") not in overridden
    }
    merged.update(overrides)

    has_api_key = any(
        str(key).lower().replace("_", "") == "apikey" and value
        for key, value in merged.items()
    )
    if not has_api_key and env.get("OPENAI_API_KEY"):
        merged["ApiKey"] = env["OPENAI_API_KEY"]

    config = ModelConfig.from_mapping(merged)
    log.debug("Model configuration loaded", provider=config.provider, model=config.model)
    return config


def make_config_loader(path: str | Path | None = None) -> ConfigLoader:
    """Return a zero-argument loader for ``SharedClientRegistry``."""

    def _load() -> ModelConfig:
        return load_model_config(path)

    return _load


def default_config_loader() -> ModelConfig:
    """Load ``.env`` into the environment, then the default settings file."""
    load_dotenv()
    return load_model_config()
