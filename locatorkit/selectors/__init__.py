# locatorkit/selectors/__init__.py
"""
Selectors package
-----------------
Declarative selectors, their compilation into native xpath/css queries and
the element locator that falls back to client-side filtering when a
selector cannot be compiled.
"""

from .builder import SelectorBuilder
from .errors import LocatorError, NoSuchElementError, StaleElementReferenceError
from .locator import ElementLocator, locate, locate_all
from .validator import ElementValidator
from .values import Pattern, Selector, Text

__all__ = [
    "ElementLocator",
    "ElementValidator",
    "LocatorError",
    "NoSuchElementError",
    "Pattern",
    "Selector",
    "SelectorBuilder",
    "StaleElementReferenceError",
    "Text",
    "locate",
    "locate_all",
]
