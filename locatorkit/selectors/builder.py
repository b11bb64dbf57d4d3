# locatorkit/selectors/builder.py
from __future__ import annotations

"""Selector builder
-------------------
Type-checks selector values, expands shortcut keys and compiles selectors
into a native (strategy, query) pair. Selectors holding regular expressions
cannot be compiled; the locator filters those on the client side.
"""

import re
from typing import Any, Mapping, Optional, Tuple

from locatorkit.selectors import xpath_support
from locatorkit.selectors.values import Pattern, Selector, Text, is_pattern, is_text
from locatorkit.utils.config import get_settings

# adjacent value -> xpath axis
ADJACENT_AXES = {
    "ancestor": "ancestor",
    "preceding": "preceding-sibling",
    "following": "following-sibling",
    "child": "child",
}

# keys with a meaning of their own; anything else must be an attribute name
SEMANTIC_KEYS = frozenset({
    "adjacent",
    "class",
    "css",
    "element",
    "href",
    "index",
    "label",
    "tag_name",
    "text",
    "visible",
    "xpath",
})

# keys compared as text: str or regex only
_STRING_OR_PATTERN_KEYS = frozenset({
    "caption",
    "href",
    "link",
    "link_text",
    "partial_link_text",
    "tag_name",
    "text",
})

_ATTRIBUTE_NAME = re.compile(r"\A[A-Za-z_][\w-]*\Z")

CompiledQuery = Tuple[str, str]


def _describe(value: Any) -> str:
    shown = value.value if is_text(value) else value
    return f"{shown!r}:{type(shown).__name__}"


class SelectorBuilder:
    """Normalizes and compiles selectors for the element locator."""

    def __init__(self, use_label_element: Optional[bool] = None) -> None:
        if use_label_element is None:
            use_label_element = get_settings().USE_LABEL_ELEMENT
        self.use_label_element = use_label_element

    # ---------- Validation / normalization ----------

    def check_type(self, key: str, value: Any) -> None:
        if key == "index":
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"expected int, got {_describe(value)}")
        elif key == "visible":
            if not isinstance(value, bool):
                raise TypeError(f"expected bool, got {_describe(value)}")
        elif key == "adjacent":
            if not is_text(value):
                raise TypeError(f"expected str, got {_describe(value)}")
            if value.value not in ADJACENT_AXES:
                raise ValueError(
                    f"adjacent must be one of {sorted(ADJACENT_AXES)}, got {value.value!r}"
                )
        elif key == "element":
            if value is None:
                raise TypeError("expected an element handle, got None")
        elif key in ("xpath", "css"):
            if not is_text(value):
                raise TypeError(f"expected str, got {_describe(value)}")
        elif key in _STRING_OR_PATTERN_KEYS:
            if not (is_text(value) or is_pattern(value)):
                raise TypeError(f"expected str or regex, got {_describe(value)}")
        elif not (is_text(value) or is_pattern(value) or isinstance(value, bool)):
            raise TypeError(f"expected str, regex or bool, got {_describe(value)}")

    def normalize(self, selector: Mapping[str, Any]) -> Selector:
        """
        Type-check every entry and rewrite shortcut keys:

        - class_name -> class
        - caption -> text
        - link / link_text -> text of an <a> element
        - partial_link_text -> substring pattern on the text of an <a> element
        - tag_name strings are lower-cased
        """
        selector = Selector.of(selector)
        entries: dict[str, Any] = {}
        for key, value in selector.items():
            self.check_type(key, value)
            if key == "class_name":
                entries["class"] = value
            elif key == "caption":
                entries["text"] = value
            elif key in ("link", "link_text"):
                entries.setdefault("tag_name", Text("a"))
                entries["text"] = value
            elif key == "partial_link_text":
                entries.setdefault("tag_name", Text("a"))
                entries["text"] = (
                    Pattern(re.compile(re.escape(value.value))) if is_text(value) else value
                )
            elif key == "tag_name":
                entries[key] = Text(value.value.lower()) if is_text(value) else value
            elif key in SEMANTIC_KEYS:
                entries[key] = value
            elif _ATTRIBUTE_NAME.match(key):
                entries[key] = value
            else:
                raise ValueError(f"invalid attribute: {key!r}")
        return Selector(entries)

    def supports_label_semantics(self) -> bool:
        return self.use_label_element

    # ---------- Compilation ----------

    def compile(self, selector: Mapping[str, Any]) -> Optional[CompiledQuery]:
        """Return (strategy, query), or None when the selector needs client-side filtering."""
        selector = Selector.of(selector)
        if "xpath" in selector or "css" in selector:
            return self._given_xpath_or_css(selector)
        if "element" in selector or selector.has_patterns():
            return None
        return "xpath", self._build_xpath(selector)

    def _given_xpath_or_css(self, selector: Selector) -> CompiledQuery:
        xpath = selector.get("xpath")
        css = selector.get("css")
        if xpath is not None and css is not None:
            raise ValueError(f"xpath and css cannot be combined ({selector!r})")

        how, what = ("xpath", xpath) if xpath is not None else ("css", css)
        rest = selector.without("xpath", "css")
        if rest and not self._combinable_with_raw_query(rest):
            raise ValueError(f"{how} cannot be combined with other selectors ({selector!r})")
        return how, what.value

    @staticmethod
    def _combinable_with_raw_query(rest: Selector) -> bool:
        keys = set(rest)
        if keys == {"tag_name"}:
            return True
        tag = rest.get("tag_name")
        return is_text(tag) and tag.value == "input" and keys == {"tag_name", "type"}

    def _build_xpath(self, selector: Selector) -> str:
        adjacent = selector.get("adjacent")
        xpath = f"./{ADJACENT_AXES[adjacent.value]}::" if adjacent else ".//"

        tag = selector.get("tag_name")
        xpath += tag.value if tag else "*"

        attributes = selector.without("adjacent", "tag_name", "index", "visible")
        if attributes:
            xpath += f"[{self.attribute_expression(attributes)}]"

        index = selector.get("index")
        if adjacent and index is not None:
            xpath += f"[{index + 1}]"
        return xpath

    def attribute_expression(self, selector: Selector) -> str:
        parts = []
        for key, value in selector.items():
            if value is True:
                parts.append(self.lhs_for(key))
            elif value is False:
                parts.append(f"not({self.lhs_for(key)})")
            else:
                parts.append(self._equal_pair(key, value.value))
        return " and ".join(parts)

    def _equal_pair(self, key: str, value: str) -> str:
        if key == "class":
            klass = xpath_support.escape(f" {value} ")
            return f"contains(concat(' ', @class, ' '), {klass})"
        if key == "label" and self.use_label_element:
            # the text of a <label> pointing at (or wrapping) the element
            text = f"normalize-space()={xpath_support.escape(value)}"
            return f"(@id=//label[{text}]/@for or parent::label[{text}])"
        if key == "type":
            value = value.lower()
        return f"{self.lhs_for(key)}={xpath_support.escape(value)}"

    def lhs_for(self, key: str) -> str:
        if key == "text":
            return "normalize-space()"
        if key == "href":
            return "normalize-space(@href)"
        if key == "type":
            # type attributes can be upper case
            return xpath_support.downcase("@type")
        return f"@{key.replace('_', '-')}"


__all__ = ["SelectorBuilder", "CompiledQuery", "ADJACENT_AXES"]
