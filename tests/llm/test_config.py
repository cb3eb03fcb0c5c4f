"""
Tests for ModelConfig.

Defaults, case-insensitive key mapping and per-field fallback when a
value is invalid.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from selfheal.llm.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    ModelConfig,
    Provider,
)


class TestDefaults:
    """Test the documented default set."""

    def test_direct_construction_uses_defaults(self) -> None:
        config = ModelConfig()

        assert config.provider == Provider.LOCAL
        assert config.base_url == "http://localhost:11434"
        assert config.api_key is None
        assert config.model == DEFAULT_MODEL
        assert config.temperature == 0.1
        assert config.max_tokens == 1000

    def test_empty_mapping_uses_defaults(self) -> None:
        assert ModelConfig.from_mapping({}) == ModelConfig()

    def test_config_is_immutable(self) -> None:
        config = ModelConfig()

        with pytest.raises(ValidationError):
            config.model = "other"  # type: ignore[misc]


class TestFromMapping:
    """Test building a config from a key-value document."""

    def test_recognized_keys(self) -> None:
        config = ModelConfig.from_mapping({
            "Provider": "Cloud",
            "ApiKey": "sk-abc",
            "BaseUrl": "http://llm.internal:11434",
            "Model": "gpt-4o",
            "Temperature": 0.7,
            "MaxTokens": 256,
        })

        assert config.provider == Provider.CLOUD
        assert config.api_key == "sk-abc"
        assert config.base_url == "http://llm.internal:11434"
        assert config.model == "gpt-4o"
        assert config.temperature == 0.7
        assert config.max_tokens == 256

    def test_keys_are_case_insensitive(self) -> None:
        config = ModelConfig.from_mapping({
            "PROVIDER": "cloud",
            "apikey": "k",
            "base_url": "http://a",
            "MODEL": "m",
            "max_tokens": 10,
        })

        assert config.provider == Provider.CLOUD
        assert config.api_key == "k"
        assert config.base_url == "http://a"
        assert config.model == "m"
        assert config.max_tokens == 10

    def test_unknown_keys_and_none_values_are_ignored(self) -> None:
        config = ModelConfig.from_mapping({"Model": None, "Logging": {"Level": "Debug"}})

        assert config == ModelConfig()

    def test_numeric_strings_are_parsed(self) -> None:
        config = ModelConfig.from_mapping({"Temperature": "0.3", "MaxTokens": "500"})

        assert config.temperature == 0.3
        assert config.max_tokens == 500

    def test_trailing_slash_stripped_from_base_url(self) -> None:
        config = ModelConfig.from_mapping({"BaseUrl": "http://localhost:11434/"})

        assert config.base_url == "http://localhost:11434"

    def test_empty_api_key_is_none(self) -> None:
        assert ModelConfig.from_mapping({"ApiKey": ""}).api_key is None


class TestProviderParsing:
    """Test provider names and aliases."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Local", Provider.LOCAL),
            ("LOCAL", Provider.LOCAL),
            ("ollama", Provider.LOCAL),
            ("Cloud", Provider.CLOUD),
            ("OpenAI", Provider.CLOUD),
            (" openai ", Provider.CLOUD),
        ],
    )
    def test_provider_aliases(self, raw: str, expected: Provider) -> None:
        assert ModelConfig.from_mapping({"Provider": raw}).provider == expected

    def test_unknown_provider_falls_back_to_local(self) -> None:
        assert ModelConfig.from_mapping({"Provider": "Anthropic"}).provider == Provider.LOCAL


class TestInvalidValuesFallBack:
    """Invalid individual values take the field default instead of raising."""

    @pytest.mark.parametrize("temperature", [-0.1, 2.5, "warm", [1]])
    def test_invalid_temperature(self, temperature: object) -> None:
        config = ModelConfig.from_mapping({"Temperature": temperature, "Model": "kept"})

        assert config.temperature == DEFAULT_TEMPERATURE
        assert config.model == "kept"

    @pytest.mark.parametrize("max_tokens", [0, -5, "many", 12.5])
    def test_invalid_max_tokens(self, max_tokens: object) -> None:
        config = ModelConfig.from_mapping({"MaxTokens": max_tokens})

        assert config.max_tokens == DEFAULT_MAX_TOKENS

    def test_empty_base_url(self) -> None:
        assert ModelConfig.from_mapping({"BaseUrl": ""}).base_url == DEFAULT_BASE_URL

    def test_boundary_temperatures_accepted(self) -> None:
        assert ModelConfig(temperature=0.0).temperature == 0.0
        assert ModelConfig(temperature=2.0).temperature == 2.0


class TestRedacted:
    """Test API key masking for display."""

    def test_long_key_keeps_prefix(self) -> None:
        data = ModelConfig(api_key="sk-test-123456").redacted()

        assert data["api_key"] == "sk-t***"
        assert data["provider"] == "local"

    def test_short_key_fully_masked(self) -> None:
        assert ModelConfig(api_key="short").redacted()["api_key"] == "***"

    def test_missing_key_stays_none(self) -> None:
        assert ModelConfig().redacted()["api_key"] is None
