"""Tests for the self-healing interaction helpers."""

from __future__ import annotations

import pytest

from selfheal.exceptions import ElementNotFoundError
from selfheal.llm.config import ModelConfig
from selfheal.llm.registry import SharedClientRegistry
from selfheal.runner.interactions import click, get_text, is_element_visible, send_keys
from selfheal.runner.locators import Locator
from selfheal.runner.self_healing import HealingContext, LocatorResolver
from tests.fakes import FakeElement, FakeLookup, RecordingObserver, ScriptedClient

SEARCH = Locator.by_id("searchBox")
SUBMIT = Locator.css("button[type='submit']")


def resolver_for(lookup: FakeLookup, suggestions: list[str] | None = None) -> LocatorResolver:
    client = ScriptedClient(suggestions)
    context = HealingContext(
        registry=SharedClientRegistry(client_factory=lambda config: client),
        config_loader=ModelConfig,
        observer=RecordingObserver(),
    )
    return LocatorResolver(lookup, context)


class TestClick:
    """Test click."""

    async def test_clicks_directly_found_element(self) -> None:
        button = FakeElement(name="submit")
        resolver = resolver_for(FakeLookup({SUBMIT: button}))

        await click(resolver, SUBMIT, "Search button")

        assert button.clicks == 1

    async def test_clicks_healed_element(self) -> None:
        button = FakeElement(name="submit")
        resolver = resolver_for(
            FakeLookup({Locator.css("#searchButton"): button}),
            suggestions=["#searchButton"],
        )

        await click(resolver, Locator.by_id("goButton"), "Search button")

        assert button.clicks == 1

    async def test_unresolved_element_raises(self) -> None:
        resolver = resolver_for(FakeLookup())

        with pytest.raises(ElementNotFoundError):
            await click(resolver, SUBMIT, "Search button")


class TestSendKeys:
    """Test send_keys."""

    async def test_clears_and_types_into_healed_element(self, search_box: FakeElement) -> None:
        search_box.typed = ["old text"]
        resolver = resolver_for(
            FakeLookup({Locator.xpath("//input[@id='searchInput']"): search_box}),
            suggestions=["//input[@id='searchInput']"],
        )

        await send_keys(resolver, SEARCH, "Wikipedia search box", "Selenium")

        assert search_box.typed == ["Selenium"]

    async def test_unresolved_element_raises(self) -> None:
        with pytest.raises(ElementNotFoundError):
            await send_keys(resolver_for(FakeLookup()), SEARCH, "Wikipedia search box", "x")


class TestGetText:
    """Test get_text."""

    async def test_returns_element_text(self) -> None:
        heading = FakeElement(name="heading", text="Selenium (software)")
        locator = Locator.css("h1#firstHeading")

        assert await get_text(resolver_for(FakeLookup({locator: heading})), locator, "Title") == "Selenium (software)"

    async def test_none_text_becomes_empty(self) -> None:
        blank = FakeElement(name="blank", text=None)
        locator = Locator.css("p.empty")

        assert await get_text(resolver_for(FakeLookup({locator: blank})), locator, "Empty paragraph") == ""


class TestIsElementVisible:
    """Test is_element_visible."""

    async def test_displayed_element(self, search_box: FakeElement) -> None:
        resolver = resolver_for(FakeLookup({SEARCH: search_box}))

        assert await is_element_visible(resolver, SEARCH, "Wikipedia search box") is True

    async def test_hidden_element(self) -> None:
        hidden = FakeElement(name="hidden", displayed=False)
        resolver = resolver_for(FakeLookup({SEARCH: hidden}))

        assert await is_element_visible(resolver, SEARCH, "Wikipedia search box") is False

    async def test_unresolved_element_is_not_visible(self) -> None:
        resolver = resolver_for(FakeLookup())

        assert await is_element_visible(resolver, SEARCH, "Wikipedia search box") is False

    async def test_driver_failure_propagates(self) -> None:
        resolver = resolver_for(FakeLookup(errors={SEARCH: RuntimeError("browser crashed")}))

        with pytest.raises(RuntimeError):
            await is_element_visible(resolver, SEARCH, "Wikipedia search box")
