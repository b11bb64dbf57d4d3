import re

import pytest
from playwright.sync_api import Error as PlaywrightError

from locatorkit.drivers.browser import BrowserElement, BrowserScope
from locatorkit.selectors.errors import NoSuchElementError, StaleElementReferenceError
from locatorkit.selectors.locator import locate, locate_all


class FakeHandle:
    """Just enough of a Playwright page / ElementHandle for the adapter."""

    def __init__(self, tag="div", attrs=None, text="", visible=True, children=(), error=None):
        self.tag = tag
        self.attrs = attrs or {}
        self._text = text
        self.visible = visible
        self.children = list(children)
        self.error = error
        self.queries = []

    def _check(self):
        if self.error is not None:
            raise self.error

    def query_selector(self, selector):
        self._check()
        self.queries.append(selector)
        return self.children[0] if self.children else None

    def query_selector_all(self, selector):
        self._check()
        self.queries.append(selector)
        return list(self.children)

    def inner_text(self):
        self._check()
        return self._text

    def evaluate(self, script):
        self._check()
        return self.tag

    def get_attribute(self, name):
        self._check()
        return self.attrs.get(name)

    def is_visible(self):
        self._check()
        return self.visible


def test_queries_are_prefixed_with_the_engine():
    page = FakeHandle(children=[FakeHandle(tag="button", attrs={"id": "go"}, text="Go")])
    scope = BrowserScope(page)

    el = scope.find_element("id", "go")
    scope.find_elements("css", "button.primary")

    assert isinstance(el, BrowserElement)
    assert page.queries == ["xpath=.//*[@id='go']", "css=button.primary"]
    assert el.text == "Go"
    assert el.tag_name == "button"
    assert el.attribute("id") == "go"
    assert el.is_displayed()


def test_missing_element_raises_no_such_element():
    with pytest.raises(NoSuchElementError):
        BrowserScope(FakeHandle()).find_element("id", "nope")


def test_detached_handle_is_stale():
    handle = FakeHandle(error=PlaywrightError("Element is not attached to the DOM"))
    el = BrowserElement(handle)

    with pytest.raises(StaleElementReferenceError):
        _ = el.text
    with pytest.raises(StaleElementReferenceError):
        el.find_elements("tag_name", "span")


def test_other_playwright_errors_propagate():
    handle = FakeHandle(error=PlaywrightError("Target page, context or browser has been closed"))
    with pytest.raises(PlaywrightError):
        BrowserElement(handle).attribute("id")


def test_locator_over_browser_scope():
    buttons = [
        FakeHandle(tag="button", attrs={"id": "a"}, text="Save Draft"),
        FakeHandle(tag="button", attrs={"id": "b"}, text="Save", visible=False),
        FakeHandle(tag="button", attrs={"id": "c"}, text="Save"),
    ]
    page = FakeHandle(children=buttons)
    scope = BrowserScope(page)

    found = locate({"tag_name": "button", "text": re.compile("^Save$"), "visible": True}, scope)
    assert found.attribute("id") == "c"
    assert page.queries[-1] == "xpath=.//button"

    locate_all({"tag_name": "button", "text": "Save"}, scope)
    assert page.queries[-1] == "xpath=.//button[normalize-space()='Save']"


def test_stale_scope_element_is_not_found():
    stale = BrowserElement(FakeHandle(error=PlaywrightError("Element is not attached to the DOM")))
    assert locate({"tag_name": "span"}, stale) is None
