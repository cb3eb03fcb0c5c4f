"""
SelfHeal - self-healing element lookup for browser tests.

Finds elements by their primary locator and, when that misses, asks a
language model (local Ollama or a cloud chat-completions API) for a
replacement locator based on the current page markup.
"""

__version__ = "1.0.0"
__author__ = "Olib AI"

from selfheal.exceptions import (
    BackendUnavailableError,
    ConfigurationInvalidError,
    ElementNotFoundError,
    SelfHealError,
)
from selfheal.llm import (
    ModelClient,
    ModelConfig,
    Provider,
    SharedClientRegistry,
    load_model_config,
    make_config_loader,
)
from selfheal.runner import (
    ElementLookup,
    Found,
    HealingContext,
    HealingObserver,
    Locator,
    LocatorResolver,
    NotFound,
    SuggestionKind,
    classify_suggestion,
    click,
    get_text,
    is_element_visible,
    send_keys,
)

__all__ = [
    "BackendUnavailableError",
    "ConfigurationInvalidError",
    "ElementLookup",
    "ElementNotFoundError",
    "Found",
    "HealingContext",
    "HealingObserver",
    "Locator",
    "LocatorResolver",
    "ModelClient",
    "ModelConfig",
    "NotFound",
    "Provider",
    "SelfHealError",
    "SharedClientRegistry",
    "SuggestionKind",
    "__version__",
    "classify_suggestion",
    "click",
    "get_text",
    "is_element_visible",
    "load_model_config",
    "make_config_loader",
    "send_keys",
]
