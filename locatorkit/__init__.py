"""
locatorkit
----------
Selector resolution for browser-automation element lookup.

  from locatorkit import locate
  from locatorkit.drivers.document import HtmlDocument

  doc = HtmlDocument.from_html(markup)
  button = locate({"tag_name": "button", "text": re.compile(r"^Save$")}, doc)
"""

from locatorkit.selectors import (
    ElementLocator,
    LocatorError,
    NoSuchElementError,
    Selector,
    StaleElementReferenceError,
    locate,
    locate_all,
)

__all__ = [
    "ElementLocator",
    "LocatorError",
    "NoSuchElementError",
    "Selector",
    "StaleElementReferenceError",
    "locate",
    "locate_all",
]
