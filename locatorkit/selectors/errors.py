# locatorkit/selectors/errors.py
from __future__ import annotations


class LocatorError(RuntimeError):
    """The engine could not turn a selector into a native query."""


class NativeLookupError(RuntimeError):
    """Base for failures reported by a native finder."""


class NoSuchElementError(NativeLookupError):
    pass


class StaleElementReferenceError(NativeLookupError):
    pass


__all__ = [
    "LocatorError",
    "NativeLookupError",
    "NoSuchElementError",
    "StaleElementReferenceError",
]
