import textwrap

import pytest

from locatorkit.drivers.document import HtmlDocument


class RecordingScope:
    """Wraps a native finder and records every locate call made through it."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def native_handle(self):
        return self

    def find_element(self, how, what):
        self.calls.append(("find_element", how, what))
        return self.inner.find_element(how, what)

    def find_elements(self, how, what):
        self.calls.append(("find_elements", how, what))
        return self.inner.find_elements(how, what)


@pytest.fixture
def make_doc():
    def _make(markup: str) -> HtmlDocument:
        return HtmlDocument.from_html(textwrap.dedent(markup))
    return _make


@pytest.fixture
def recording():
    return RecordingScope
