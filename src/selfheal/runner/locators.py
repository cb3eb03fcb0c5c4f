"""
Locator values, lookup results and suggestion classification.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

E = TypeVar("E")


class LocatorStrategy(StrEnum):
    """How a locator's value is interpreted."""

    ID = "id"
    CSS_SELECTOR = "css selector"
    XPATH = "xpath"
    NAME = "name"
    CLASS_NAME = "class name"
    TAG_NAME = "tag name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"


_DISPLAY_NAMES: dict[LocatorStrategy, str] = {
    LocatorStrategy.ID: "Id",
    LocatorStrategy.CSS_SELECTOR: "CssSelector",
    LocatorStrategy.XPATH: "XPath",
    LocatorStrategy.NAME: "Name",
    LocatorStrategy.CLASS_NAME: "ClassName",
    LocatorStrategy.TAG_NAME: "TagName",
    LocatorStrategy.LINK_TEXT: "LinkText",
    LocatorStrategy.PARTIAL_LINK_TEXT: "PartialLinkText",
}


@dataclass(frozen=True, slots=True)
class Locator:
    """An immutable (strategy, value) pair identifying an element."""

    strategy: LocatorStrategy
    value: str

    @classmethod
    def by_id(cls, value: str) -> Locator:
        return cls(LocatorStrategy.ID, value)

    @classmethod
    def css(cls, value: str) -> Locator:
        return cls(LocatorStrategy.CSS_SELECTOR, value)

    @classmethod
    def xpath(cls, value: str) -> Locator:
        return cls(LocatorStrategy.XPATH, value)

    @classmethod
    def name(cls, value: str) -> Locator:
        return cls(LocatorStrategy.NAME, value)

    @classmethod
    def class_name(cls, value: str) -> Locator:
        return cls(LocatorStrategy.CLASS_NAME, value)

    @classmethod
    def tag_name(cls, value: str) -> Locator:
        return cls(LocatorStrategy.TAG_NAME, value)

    @classmethod
    def link_text(cls, value: str) -> Locator:
        return cls(LocatorStrategy.LINK_TEXT, value)

    @classmethod
    def partial_link_text(cls, value: str) -> Locator:
        return cls(LocatorStrategy.PARTIAL_LINK_TEXT, value)

    def describe(self) -> str:
        """Render as ``By.<Strategy>: <value>`` for prompts and logs."""
        return f"By.{_DISPLAY_NAMES[self.strategy]}: {self.value}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True, slots=True)
class Found(Generic[E]):
    """Lookup hit."""

    element: E


@dataclass(frozen=True, slots=True)
class NotFound:
    """Lookup miss for ``locator``."""

    locator: Locator


LookupResult = Found[Any] | NotFound


class SuggestionKind(StrEnum):
    """Selector language a suggestion appears to be written in."""

    XPATH = "xpath"
    CSS = "css"
    AMBIGUOUS = "ambiguous"


XPATH_PREFIXES: tuple[str, ...] = ("//", "(//")
CSS_MARKERS: tuple[str, ...] = ("#", ".", "[")


def classify_suggestion(suggestion: str) -> SuggestionKind:
    """
    Classify free-text model output, in precedence order:

    1. starts with ``//`` or ``(//`` -> XPATH
    2. contains ``#``, ``.`` or ``[`` -> CSS
    3. anything else -> AMBIGUOUS
    """
    if suggestion.startswith(XPATH_PREFIXES):
        return SuggestionKind.XPATH
    if any(marker in suggestion for marker in CSS_MARKERS):
        return SuggestionKind.CSS
    return SuggestionKind.AMBIGUOUS


def candidate_locators(suggestion: str) -> list[Locator]:
    """Locators to try for a suggestion, cheapest interpretation first."""
    match classify_suggestion(suggestion):
        case SuggestionKind.XPATH:
            return [Locator.xpath(suggestion)]
        case SuggestionKind.CSS:
            return [Locator.css(suggestion)]
        case _:
            return [Locator.css(suggestion), Locator.xpath(suggestion)]
