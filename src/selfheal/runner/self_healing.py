"""
Self-healing locator resolution.

``LocatorResolver`` tries the primary locator first and only falls back
to the model when the lookup reports a miss:

    Direct -> (miss) -> Healing -> Resolved | Exhausted

Healing captures the page markup once, then asks the shared model client
for a suggestion up to ``max_attempts`` times, strictly one after the
other. Each suggestion is classified (XPath, CSS or ambiguous) and looked
up; the first hit wins. Exhaustion and caller timeouts both surface as
``ElementNotFoundError``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from selfheal.exceptions import ElementNotFoundError
from selfheal.llm.loader import ConfigLoader, default_config_loader
from selfheal.llm.registry import SharedClientRegistry
from selfheal.runner.locators import Found, Locator, LookupResult, candidate_locators

if TYPE_CHECKING:
    from selfheal.llm.client import ModelClient

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@runtime_checkable
class ElementLookup(Protocol):
    """
    Page inspection and element interaction supplied by a UI driver.

    ``find_element`` reports a miss as ``NotFound`` instead of raising;
    anything it does raise is a genuine driver failure.
    """

    async def find_element(self, locator: Locator) -> LookupResult: ...

    async def current_markup(self) -> str: ...

    async def click(self, element: Any) -> None: ...

    async def clear_and_type(self, element: Any, text: str) -> None: ...

    async def text_of(self, element: Any) -> str | None: ...

    async def is_displayed(self, element: Any) -> bool: ...


class HealingObserver(Protocol):
    """Checkpoints reported by the resolver during healing."""

    def miss(self, locator: Locator, description: str) -> None: ...

    def attempt_started(self, description: str, attempt: int, max_attempts: int) -> None: ...

    def attempt_failed(
        self,
        description: str,
        attempt: int,
        max_attempts: int,
        suggestion: str,
        error: str,
    ) -> None: ...

    def resolved(self, description: str, attempt: int, suggestion: str, locator: Locator) -> None: ...

    def exhausted(self, description: str, attempts: int, reason: str) -> None: ...


class StructlogHealingObserver:
    """Writes one structured log event per healing checkpoint."""

    def __init__(self) -> None:
        self._log = logger.bind(component="self_healing")

    def miss(self, locator: Locator, description: str) -> None:
        self._log.info(
            "Element not found, attempting self-healing",
            locator=locator.describe(),
            description=description,
        )

    def attempt_started(self, description: str, attempt: int, max_attempts: int) -> None:
        self._log.info(
            "Asking model for a locator",
            description=description,
            attempt=attempt,
            max_attempts=max_attempts,
        )

    def attempt_failed(
        self,
        description: str,
        attempt: int,
        max_attempts: int,
        suggestion: str,
        error: str,
    ) -> None:
        self._log.warning(
            "Healing attempt failed",
            description=description,
            attempt=attempt,
            max_attempts=max_attempts,
            suggestion=suggestion,
            error=error,
        )

    def resolved(self, description: str, attempt: int, suggestion: str, locator: Locator) -> None:
        self._log.info(
            "Self-healing successful",
            description=description,
            attempt=attempt,
            suggestion=suggestion,
            locator=locator.describe(),
        )

    def exhausted(self, description: str, attempts: int, reason: str) -> None:
        self._log.error(
            "Self-healing failed",
            description=description,
            attempts=attempts,
            reason=reason,
        )


@dataclass
class HealingContext:
    """
    Shared state handed to every resolver.

    Holds the client registry (one lazily-built model client), the loader
    used to configure it and the observer receiving healing checkpoints.
    """

    registry: SharedClientRegistry = field(default_factory=SharedClientRegistry)
    config_loader: ConfigLoader = default_config_loader
    observer: HealingObserver = field(default_factory=StructlogHealingObserver)

    def client(self) -> ModelClient:
        """Return the shared model client, building it on first use."""
        return self.registry.get_or_create(self.config_loader)


class LocatorResolver:
    """
    Resolves locators against one page, healing misses with the model.

    Usage::

        resolver = LocatorResolver(SeleniumElementLookup(driver), context)
        element = await resolver.resolve_element(Locator.by_id("searchBox"), "Search box")
    """

    def __init__(
        self,
        lookup: ElementLookup,
        context: HealingContext | None = None,
    ) -> None:
        self._lookup = lookup
        self._context = context or HealingContext()

    @property
    def lookup(self) -> ElementLookup:
        """The element-lookup collaborator this resolver drives."""
        return self._lookup

    @property
    def context(self) -> HealingContext:
        return self._context

    async def resolve_element(
        self,
        locator: Locator,
        description: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float | None = None,
    ) -> Any:
        """
        Find an element, healing the locator through the model on a miss.

        Args:
            locator: Primary locator
            description: Human-readable description of the element
            max_attempts: Number of model suggestions to try
            timeout: Optional bound in seconds on the healing stage

        Returns:
            The element handle produced by the lookup collaborator

        Raises:
            ElementNotFoundError: If no locator resolved within the budget
            ValueError: If max_attempts is less than 1
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        result = await self._lookup.find_element(locator)
        if isinstance(result, Found):
            return result.element

        observer = self._context.observer
        observer.miss(locator, description)

        attempts_made = 0
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                markup = await self._lookup.current_markup()
                client = await self._shared_client()

                for attempt in range(1, max_attempts + 1):
                    attempts_made = attempt
                    element = await self._attempt(
                        client, markup, locator, description, attempt, max_attempts
                    )
                    if element is not None:
                        return element
        except TimeoutError as e:
            if not deadline.expired():
                raise
            observer.exhausted(description, attempts_made, reason="timeout")
            raise ElementNotFoundError(description) from e

        observer.exhausted(description, attempts_made, reason="attempts exhausted")
        raise ElementNotFoundError(description)

    async def _shared_client(self) -> ModelClient:
        """Return the shared client, building it in a worker thread on first use."""
        client = self._context.registry.peek()
        if client is not None:
            return client
        # Config loading reads .env and the settings file
        return await asyncio.to_thread(self._context.client)

    async def _attempt(
        self,
        client: ModelClient,
        markup: str,
        locator: Locator,
        description: str,
        attempt: int,
        max_attempts: int,
    ) -> Any | None:
        """Run one suggest-classify-lookup round. Returns None on failure."""
        observer = self._context.observer
        observer.attempt_started(description, attempt, max_attempts)

        suggestion = await client.request_locator_suggestion(
            markup, locator.describe(), description
        )
        if not suggestion:
            observer.attempt_failed(
                description, attempt, max_attempts, suggestion="", error="empty suggestion"
            )
            return None

        error = "suggested locator matched nothing"
        for candidate in candidate_locators(suggestion):
            try:
                result = await self._lookup.find_element(candidate)
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
                continue
            if isinstance(result, Found):
                observer.resolved(description, attempt, suggestion, candidate)
                return result.element

        observer.attempt_failed(description, attempt, max_attempts, suggestion=suggestion, error=error)
        return None
