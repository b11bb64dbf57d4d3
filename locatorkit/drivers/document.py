# locatorkit/drivers/document.py
from __future__ import annotations

"""Static HTML driver
---------------------
Native finder over an lxml-parsed HTML document. Useful for offline
resolution of saved pages and as a deterministic stand-in for a browser.
Visibility is approximated from markup (hidden attribute, inline style,
non-rendered tags) since no layout is computed.
"""

import re
from pathlib import Path
from typing import Iterator, List, Optional

from lxml import etree, html
from lxml.cssselect import CSSSelector, SelectorError

from locatorkit.drivers.strategies import translate
from locatorkit.selectors.errors import NoSuchElementError, StaleElementReferenceError

_NOT_RENDERED = frozenset({
    "head", "link", "meta", "noscript", "script", "style", "template", "title",
})

_BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "option", "p", "pre",
    "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_HIDDEN_STYLE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def _is_element(node) -> bool:
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def _hidden_itself(node: etree._Element) -> bool:
    if node.tag in _NOT_RENDERED or node.get("hidden") is not None:
        return True
    if _HIDDEN_STYLE.search(node.get("style") or ""):
        return True
    return node.tag == "input" and (node.get("type") or "").lower() == "hidden"


def _displayed(node: etree._Element) -> bool:
    while node is not None:
        if _hidden_itself(node):
            return False
        node = node.getparent()
    return True


def _text_chunks(node: etree._Element) -> Iterator[str]:
    block = node.tag in _BLOCK_TAGS
    if block:
        yield "\n"
    if node.text:
        yield _WHITESPACE.sub(" ", node.text)
    for child in node:
        if _is_element(child) and not _hidden_itself(child):
            yield from _text_chunks(child)
        if child.tail:
            yield _WHITESPACE.sub(" ", child.tail)
    if block:
        yield "\n"


def visible_text(node: etree._Element) -> str:
    """Rendered-like text: hidden subtrees skipped, one line per block element."""
    if not _displayed(node):
        return ""
    lines = (line.strip() for line in "".join(_text_chunks(node)).split("\n"))
    return "\n".join(line for line in lines if line)


class _HtmlFinder:
    """find_element / find_elements evaluated from a context node of one document."""

    _includes_context = True

    def __init__(self, root: etree._Element) -> None:
        self._root = root

    def _context(self) -> etree._Element:
        raise NotImplementedError

    def native_handle(self) -> "_HtmlFinder":
        return self

    def find_element(self, how: str, what: str) -> "HtmlElement":
        found = self.find_elements(how, what)
        if not found:
            raise NoSuchElementError(f"no element matches {how}={what!r}")
        return found[0]

    def find_elements(self, how: str, what: str) -> List["HtmlElement"]:
        context = self._context()
        engine, query = translate(how, what)
        try:
            if engine == "css":
                nodes = CSSSelector(query, translator="html")(context)
            else:
                nodes = context.xpath(query)
        except (etree.XPathError, SelectorError) as exc:
            raise ValueError(f"invalid {engine} query {query!r}: {exc}") from exc

        return [
            HtmlElement(node, self._root)
            for node in nodes
            if _is_element(node) and (self._includes_context or node is not context)
        ]


class HtmlDocument(_HtmlFinder):
    """Query scope over a whole parsed document."""

    @classmethod
    def from_html(cls, markup: str) -> "HtmlDocument":
        return cls(html.document_fromstring(markup))

    @classmethod
    def from_file(cls, path: Path | str) -> "HtmlDocument":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"HTML file not found: {p}")
        return cls.from_html(p.read_text(encoding="utf-8"))

    @property
    def root(self) -> "HtmlElement":
        return HtmlElement(self._root, self._root)

    def _context(self) -> etree._Element:
        return self._root


class HtmlElement(_HtmlFinder):
    """Element handle; also usable as a query scope for nested lookups."""

    _includes_context = False

    def __init__(self, node: etree._Element, root: etree._Element) -> None:
        super().__init__(root)
        self._node = node

    def _ensure_attached(self) -> etree._Element:
        top = self._node
        while top.getparent() is not None:
            top = top.getparent()
        if top is not self._root:
            raise StaleElementReferenceError(f"<{self._node.tag}> is no longer attached to the document")
        return self._node

    def _context(self) -> etree._Element:
        return self._ensure_attached()

    @property
    def text(self) -> str:
        return visible_text(self._ensure_attached())

    @property
    def tag_name(self) -> str:
        return self._ensure_attached().tag

    def attribute(self, name: str) -> Optional[str]:
        return self._ensure_attached().get(name)

    def is_displayed(self) -> bool:
        return _displayed(self._ensure_attached())

    @property
    def node(self) -> etree._Element:
        return self._node

    def outer_html(self) -> str:
        return etree.tostring(self._node, encoding="unicode", with_tail=False)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HtmlElement) and other._node is self._node

    def __hash__(self) -> int:
        return hash(self._node)

    def __repr__(self) -> str:
        ident = self._node.get("id")
        return f"<HtmlElement {self._node.tag}{'#' + ident if ident else ''}>"


__all__ = ["HtmlDocument", "HtmlElement", "visible_text"]
