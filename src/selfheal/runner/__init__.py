"""
Locator resolution with model-backed self-healing.

- Primary locator first, model suggestions only on a miss
- Suggestion classification (XPath, CSS, ambiguous)
- Shared model client via an explicit HealingContext
- Interaction helpers built on the resolver
"""

from selfheal.runner.interactions import (
    click,
    get_text,
    is_element_visible,
    send_keys,
)
from selfheal.runner.locators import (
    Found,
    Locator,
    LocatorStrategy,
    LookupResult,
    NotFound,
    SuggestionKind,
    candidate_locators,
    classify_suggestion,
)
from selfheal.runner.self_healing import (
    DEFAULT_MAX_ATTEMPTS,
    ElementLookup,
    HealingContext,
    HealingObserver,
    LocatorResolver,
    StructlogHealingObserver,
)

__all__ = [
    # Locators
    "Found",
    "Locator",
    "LocatorStrategy",
    "LookupResult",
    "NotFound",
    "SuggestionKind",
    "candidate_locators",
    "classify_suggestion",
    # Resolver
    "DEFAULT_MAX_ATTEMPTS",
    "ElementLookup",
    "HealingContext",
    "HealingObserver",
    "LocatorResolver",
    "StructlogHealingObserver",
    # Interactions
    "click",
    "get_text",
    "is_element_visible",
    "send_keys",
]
