# locatorkit/drivers/browser.py
from __future__ import annotations

"""Playwright driver
--------------------
Adapts Playwright's sync API (Page / Frame / ElementHandle) to the native
finder protocol the element locator works against.
"""

from typing import Any, Callable, List, Optional, TypeVar

from playwright.sync_api import ElementHandle, Error as PlaywrightError

from locatorkit.drivers.strategies import translate
from locatorkit.selectors.errors import NoSuchElementError, StaleElementReferenceError

T = TypeVar("T")

_DETACHED_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
)


def _call(fn: Callable[..., T], *args: Any) -> T:
    """Run a Playwright call, reporting detached-element failures as stale references."""
    try:
        return fn(*args)
    except PlaywrightError as exc:
        message = str(exc)
        if any(marker in message.lower() for marker in _DETACHED_MARKERS):
            raise StaleElementReferenceError(message) from exc
        raise


class _PlaywrightFinder:
    def __init__(self, target: Any) -> None:
        # Page, Frame or ElementHandle: all expose query_selector(_all)
        self._target = target

    def native_handle(self) -> "_PlaywrightFinder":
        return self

    def find_element(self, how: str, what: str) -> "BrowserElement":
        engine, query = translate(how, what)
        handle = _call(self._target.query_selector, f"{engine}={query}")
        if handle is None:
            raise NoSuchElementError(f"no element matches {how}={what!r}")
        return BrowserElement(handle)

    def find_elements(self, how: str, what: str) -> List["BrowserElement"]:
        engine, query = translate(how, what)
        handles = _call(self._target.query_selector_all, f"{engine}={query}")
        return [BrowserElement(h) for h in handles]


class BrowserScope(_PlaywrightFinder):
    """Query scope over a Playwright Page or Frame."""


class BrowserElement(_PlaywrightFinder):
    """Element handle backed by a Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle) -> None:
        super().__init__(handle)
        self.handle = handle

    @property
    def text(self) -> str:
        return _call(self.handle.inner_text)

    @property
    def tag_name(self) -> str:
        return _call(self.handle.evaluate, "el => el.tagName.toLowerCase()")

    def attribute(self, name: str) -> Optional[str]:
        return _call(self.handle.get_attribute, name)

    def is_displayed(self) -> bool:
        return _call(self.handle.is_visible)

    def outer_html(self) -> str:
        return _call(self.handle.evaluate, "el => el.outerHTML")

    def __repr__(self) -> str:
        return f"<BrowserElement {self.handle!r}>"


__all__ = ["BrowserScope", "BrowserElement"]
