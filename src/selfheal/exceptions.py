"""
Exception hierarchy for SelfHeal.

Only ``ElementNotFoundError`` ever reaches callers of the resolution
engine. The other two are raised and absorbed internally.
"""

from __future__ import annotations


class SelfHealError(Exception):
    """Base exception for all SelfHeal errors."""


class ElementNotFoundError(SelfHealError):
    """Raised when no locator, original or suggested, resolved an element."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"Could not find element: {description}")


class BackendUnavailableError(SelfHealError):
    """Raised when a model backend cannot produce a usable suggestion.

    Covers transport failures, timeouts, non-2xx responses and malformed
    bodies. Never escapes ``ModelClient.request_locator_suggestion``.
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} backend unavailable: {reason}")


class ConfigurationInvalidError(SelfHealError):
    """Raised when a configuration document cannot be parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
