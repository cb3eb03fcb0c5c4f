"""
Selenium WebDriver integration.

``SeleniumElementLookup`` adapts a (blocking) WebDriver to the async
``ElementLookup`` protocol by running each call in a worker thread.
``create_driver`` builds a Chrome session, local or on a remote grid.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from collections.abc import Iterator
from typing import TYPE_CHECKING

import structlog
from selenium import webdriver
from selenium.common.exceptions import InvalidSelectorException, NoSuchElementException
from selenium.webdriver.common.by import By

from selfheal.runner.locators import Found, Locator, LocatorStrategy, LookupResult, NotFound

if TYPE_CHECKING:
    from selenium.webdriver.remote.webdriver import WebDriver
    from selenium.webdriver.remote.webelement import WebElement

logger = structlog.get_logger(__name__)

REMOTE_URL_ENV = "SELENIUM_REMOTE_URL"
IMPLICIT_WAIT_SECONDS = 10
PAGE_LOAD_TIMEOUT_SECONDS = 30

BY_STRATEGY: dict[LocatorStrategy, str] = {
    LocatorStrategy.ID: By.ID,
    LocatorStrategy.CSS_SELECTOR: By.CSS_SELECTOR,
    LocatorStrategy.XPATH: By.XPATH,
    LocatorStrategy.NAME: By.NAME,
    LocatorStrategy.CLASS_NAME: By.CLASS_NAME,
    LocatorStrategy.TAG_NAME: By.TAG_NAME,
    LocatorStrategy.LINK_TEXT: By.LINK_TEXT,
    LocatorStrategy.PARTIAL_LINK_TEXT: By.PARTIAL_LINK_TEXT,
}


class SeleniumElementLookup:
    """
    ``ElementLookup`` backed by a Selenium WebDriver.

    Missing elements and selectors the browser rejects as malformed are
    both reported as ``NotFound``; a bad CSS guess must fall through to
    the XPath interpretation. Other WebDriver errors propagate.
    """

    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    @property
    def driver(self) -> WebDriver:
        return self._driver

    async def find_element(self, locator: Locator) -> LookupResult:
        by = BY_STRATEGY[locator.strategy]
        try:
            element = await asyncio.to_thread(self._driver.find_element, by, locator.value)
        except (NoSuchElementException, InvalidSelectorException):
            return NotFound(locator)
        return Found(element)

    async def current_markup(self) -> str:
        return await asyncio.to_thread(lambda: self._driver.page_source or "")

    async def click(self, element: WebElement) -> None:
        await asyncio.to_thread(element.click)

    async def clear_and_type(self, element: WebElement, text: str) -> None:
        def _clear_and_type() -> None:
            element.clear()
            element.send_keys(text)

        await asyncio.to_thread(_clear_and_type)

    async def text_of(self, element: WebElement) -> str | None:
        return await asyncio.to_thread(lambda: element.text)

    async def is_displayed(self, element: WebElement) -> bool:
        return bool(await asyncio.to_thread(element.is_displayed))


def build_chrome_options(remote: bool, headless: bool = False) -> webdriver.ChromeOptions:
    """Chrome options for a local or remote (CI grid) session."""
    options = webdriver.ChromeOptions()
    options.add_argument("--disable-blink-features=AutomationControlled")

    if remote:
        for arg in (
            "--headless",
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
            "--window-size=1920,1080",
        ):
            options.add_argument(arg)
    else:
        options.add_argument("--start-maximized")
        if headless:
            options.add_argument("--headless")
            options.add_argument("--disable-gpu")

    return options


def create_driver(
    remote_url: str | None = None,
    headless: bool = False,
) -> WebDriver:
    """
    Start a Chrome WebDriver session.

    Args:
        remote_url: Selenium grid URL (default ``$SELENIUM_REMOTE_URL``).
            When set, the session is remote and always headless.
        headless: Run a local browser headless

    Returns:
        Configured WebDriver with implicit wait and page-load timeout set
    """
    remote_url = remote_url or os.environ.get(REMOTE_URL_ENV) or None
    log = logger.bind(component="driver_factory")

    if remote_url:
        log.info("Using remote WebDriver", remote_url=remote_url)
        options = build_chrome_options(remote=True)
        driver = webdriver.Remote(command_executor=remote_url, options=options)
    else:
        log.info("Using local ChromeDriver", headless=headless)
        options = build_chrome_options(remote=False, headless=headless)
        driver = webdriver.Chrome(options=options)

    driver.implicitly_wait(IMPLICIT_WAIT_SECONDS)
    driver.set_page_load_timeout(PAGE_LOAD_TIMEOUT_SECONDS)
    return driver


@contextlib.contextmanager
def driver_session(
    remote_url: str | None = None,
    headless: bool = False,
) -> Iterator[WebDriver]:
    """Create a driver and always quit it on exit."""
    driver = create_driver(remote_url=remote_url, headless=headless)
    try:
        yield driver
    finally:
        with contextlib.suppress(Exception):
            driver.quit()
        logger.info("WebDriver closed")
