"""
Element interactions with self-healing lookup.

Drop-in replacements for "find, then act" sequences in page objects.
"""

from __future__ import annotations

import structlog

from selfheal.exceptions import ElementNotFoundError
from selfheal.runner.locators import Locator
from selfheal.runner.self_healing import LocatorResolver

logger = structlog.get_logger(__name__)


async def click(resolver: LocatorResolver, locator: Locator, description: str) -> None:
    """Resolve the element and click it."""
    element = await resolver.resolve_element(locator, description)
    await resolver.lookup.click(element)
    logger.info("Clicked", description=description)


async def send_keys(
    resolver: LocatorResolver,
    locator: Locator,
    description: str,
    text: str,
) -> None:
    """Resolve the element, clear it and type ``text``."""
    element = await resolver.resolve_element(locator, description)
    await resolver.lookup.clear_and_type(element, text)
    logger.info("Entered text", description=description)


async def get_text(resolver: LocatorResolver, locator: Locator, description: str) -> str:
    """Resolve the element and return its visible text."""
    element = await resolver.resolve_element(locator, description)
    text = await resolver.lookup.text_of(element) or ""
    logger.info("Got text", description=description, text=text)
    return text


async def is_element_visible(
    resolver: LocatorResolver,
    locator: Locator,
    description: str,
) -> bool:
    """
    Check whether the element exists and is displayed.

    A resolution failure counts as not visible rather than an error.
    """
    try:
        element = await resolver.resolve_element(locator, description)
    except ElementNotFoundError:
        logger.info("Element not found", description=description)
        return False

    visible = await resolver.lookup.is_displayed(element)
    logger.info("Element visibility", description=description, visible=visible)
    return visible
