"""Pytest fixtures for SelfHeal tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from selfheal.llm.config import ModelConfig
from tests.fakes import FakeElement, RecordingObserver


@pytest.fixture
def observer() -> RecordingObserver:
    """Observer recording healing checkpoints."""
    return RecordingObserver()


@pytest.fixture
def search_box() -> FakeElement:
    return FakeElement(name="searchInput", text="")


@pytest.fixture
def local_config() -> ModelConfig:
    """Local (Ollama) configuration pointing at http://x."""
    return ModelConfig.from_mapping({
        "Provider": "Local",
        "BaseUrl": "http://x",
        "Model": "m",
        "Temperature": 0.1,
        "MaxTokens": 1000,
    })


@pytest.fixture
def cloud_config() -> ModelConfig:
    """Cloud (chat completions) configuration with an API key."""
    return ModelConfig.from_mapping({
        "Provider": "Cloud",
        "ApiKey": "sk-test-123456",
        "Model": "gpt-4o-mini",
    })


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()
