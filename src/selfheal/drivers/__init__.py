"""
UI driver adapters implementing ``ElementLookup``.
"""

from selfheal.drivers.selenium_driver import (
    SeleniumElementLookup,
    build_chrome_options,
    create_driver,
    driver_session,
)

__all__ = [
    "SeleniumElementLookup",
    "build_chrome_options",
    "create_driver",
    "driver_session",
]
