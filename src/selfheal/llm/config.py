"""
Model backend configuration.

``ModelConfig`` is a frozen value object. It never reads files or the
environment itself; see ``selfheal.llm.loader`` for that. Invalid
individual values fall back to the field default instead of raising, so
a half-broken settings file still yields a working configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = structlog.get_logger(__name__)


class Provider(StrEnum):
    """Model backend protocol."""

    LOCAL = "local"  # Ollama-style /api/generate
    CLOUD = "cloud"  # OpenAI-style chat completions


DEFAULT_PROVIDER = Provider.LOCAL
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "qwen3-coder:480b-cloud"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 1000

_PROVIDER_ALIASES: dict[str, Provider] = {
    "local": Provider.LOCAL,
    "ollama": Provider.LOCAL,
    "cloud": Provider.CLOUD,
    "openai": Provider.CLOUD,
}

# Normalized document key -> field name
_KEY_TO_FIELD: dict[str, str] = {
    "provider": "provider",
    "apikey": "api_key",
    "baseurl": "base_url",
    "model": "model",
    "temperature": "temperature",
    "maxtokens": "max_tokens",
}


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower().replace("_", "").replace("-", "")


class ModelConfig(BaseModel):
    """Connection parameters for one model backend."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    provider: Provider = Field(default=DEFAULT_PROVIDER, description="Backend protocol")
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1, description="Local backend base URL")
    api_key: str | None = Field(default=None, description="Bearer token for the cloud backend")
    model: str = Field(default=DEFAULT_MODEL, min_length=1, description="Model identifier")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0, description="Max output length")

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        """Validate one field, substituting its default when invalid."""
        name = info.field_name
        if name == "provider" and isinstance(value, str):
            value = _PROVIDER_ALIASES.get(value.strip().lower(), value)
        try:
            result = handler(value)
        except ValidationError as e:
            default = cls.model_fields[name].default
            logger.warning(
                "Invalid configuration value, using default",
                field=name,
                value=None if name == "api_key" else repr(value),
                default=default,
                error=e.errors()[0]["msg"] if e.errors() else str(e),
            )
            return default
        if name == "base_url":
            result = result.rstrip("/")
        if name == "api_key" and not result:
            result = None
        return result

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> ModelConfig:
        """Build a config from a key-value document.

        Keys match case-insensitively (``BaseUrl``, ``baseurl`` and
        ``base_url`` are the same key). Unknown keys and ``None`` values
        are ignored; missing keys take defaults.
        """
        values: dict[str, Any] = {}
        for key, value in mapping.items():
            field_name = _KEY_TO_FIELD.get(_normalize_key(key))
            if field_name is None or value is None:
                continue
            values[field_name] = value
        return cls(**values)

    def redacted(self) -> dict[str, Any]:
        """Return the config as a dict with the API key masked."""
        data = self.model_dump(mode="json")
        if self.api_key:
            data["api_key"] = f"{self.api_key[:4]}***" if len(self.api_key) > 8 else "***"
        return data
