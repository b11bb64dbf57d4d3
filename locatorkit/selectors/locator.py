# locatorkit/selectors/locator.py
from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from locatorkit.selectors import xpath_support
from locatorkit.selectors.builder import SelectorBuilder
from locatorkit.selectors.errors import LocatorError, NoSuchElementError, StaleElementReferenceError
from locatorkit.selectors.scope import WD_FINDERS, NativeElement, NativeFinder, QueryScope
from locatorkit.selectors.validator import ElementValidator
from locatorkit.selectors.values import Pattern, Selector, is_pattern, is_text
from locatorkit.utils.config import get_settings
from locatorkit.utils.logger import get_logger, log_with_context

log = get_logger(__name__)


class LookupMode(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


# Regular expressions whose literal head and tail can become xpath contains()
# predicates. Alternation anywhere disqualifies the whole expression.
CONVERTIBLE_REGEXP = re.compile(
    r"""
    \A
    ([^\[\]\\^$.|?*+(){}]*)   # leading literal characters
    [^|]*?
    ([^\[\]\\^$.|?*+(){}]*)   # trailing literal characters
    \Z
    """,
    re.VERBOSE,
)

# keys whose fetched value is not the raw attribute text
_NO_PREDICATE_KEYS = frozenset({"tag_name", "text"})


# ---------- Value fetch & filtering ----------


def fetch_value(element: NativeElement, key: str) -> Optional[str]:
    """Return the value of `element` that a selector entry under `key` is compared to."""
    if key == "text":
        return element.text
    if key == "tag_name":
        return element.tag_name.lower()
    if key == "href":
        href = element.attribute("href")
        return href.strip() if href is not None else None
    if key == "class_name":
        return element.attribute("class")
    if key in ("link", "link_text", "partial_link_text"):
        return element.text if element.tag_name.lower() == "a" else None
    return element.attribute(key.replace("_", "-"))


def matches_selector(element: NativeElement, selector: Mapping[str, Any]) -> bool:
    return all(value.matches(fetch_value(element, key)) for key, value in selector.items())


def filter_elements(
    elements: Sequence[NativeElement],
    visible: Optional[bool],
    index: Optional[int],
    mode: LookupMode,
) -> Union[Optional[NativeElement], List[NativeElement]]:
    if visible is not None:
        elements = [el for el in elements if el.is_displayed() == visible]
    else:
        elements = list(elements)

    if mode is LookupMode.MULTIPLE:
        if index is not None:
            raise ValueError("can't locate all elements by index")
        return elements

    try:
        return elements[index or 0]
    except IndexError:
        return None


def regexp_literals(pattern: Pattern) -> List[str]:
    """
    Substrings every match of `pattern` must contain, taken from its literal
    head and tail. Empty for case-insensitive, verbose or alternating patterns.
    """
    if pattern.ignore_case or pattern.verbose:
        return []
    source = pattern.source
    m = CONVERTIBLE_REGEXP.match(source)
    if not m:
        return []

    leading, trailing = m.group(1), m.group(2)
    # a quantifier after the head makes its last character optional
    if leading and m.end(1) < len(source) and source[m.end(1)] in "*?{":
        leading = leading[:-1]
    # the tail started inside an escape sequence
    if trailing and m.start(2) > 0 and source[m.start(2) - 1] == "\\":
        trailing = ""
    return [lit for lit in (leading, trailing) if lit]


# ---------- Locator ----------


class ElementLocator:
    """
    Resolves one selector against one query scope.

    Single-key selectors the native finder understands are sent as-is;
    everything else is normalized and compiled by the selector builder. When
    compilation is impossible (regular expressions, <label> text) candidates
    are fetched with the string-only part of the selector and filtered here.
    """

    def __init__(
        self,
        query_scope: QueryScope,
        selector: Mapping[str, Any],
        selector_builder: Optional[SelectorBuilder] = None,
        element_validator: Optional[ElementValidator] = None,
        *,
        convert_regexp_to_contains: Optional[bool] = None,
    ) -> None:
        self.query_scope = query_scope
        self.selector = Selector.of(selector)
        self.selector_builder = selector_builder or SelectorBuilder()
        self.element_validator = element_validator or ElementValidator()
        if convert_regexp_to_contains is None:
            convert_regexp_to_contains = get_settings().REGEXP_TO_CONTAINS
        self.convert_regexp_to_contains = convert_regexp_to_contains
        self.log = log_with_context(log, selector=repr(self.selector))

    # ---------- Public API ----------

    def locate(self) -> Optional[NativeElement]:
        """First matching element, or None."""
        if "element" in self.selector:
            return self.selector["element"]
        try:
            return self._locate()
        except (NoSuchElementError, StaleElementReferenceError) as exc:
            self.log.debug(f"{type(exc).__name__} while locating {self.selector!r}; treating as not found")
            return None

    def locate_all(self) -> List[NativeElement]:
        """All matching elements in document order."""
        if "element" in self.selector:
            return [self.selector["element"]]
        if len(self.selector) == 1:
            return self._find_all_by_one()
        return self._find_all_by_multiple()

    # ---------- Single result ----------

    def _locate(self) -> Optional[NativeElement]:
        if self._id_lookup_applies():
            return self._by_id()

        if len(self.selector) == 1:
            element = self._find_first_by_one()
        else:
            element = self._find_first_by_multiple()

        # Raw xpath/css skip normalization, so re-check what else was asked for
        if element is None or not ("xpath" in self.selector or "css" in self.selector):
            return element
        return element if self.element_validator.validate(element, self.selector) else None

    def _id_lookup_applies(self) -> bool:
        if not is_text(self.selector.get("id")) or "adjacent" in self.selector:
            return False
        return not self.selector.without("id", "tag_name")

    def _by_id(self) -> Optional[NativeElement]:
        tag_name = self.selector.get("tag_name")
        if tag_name is not None:
            self.selector_builder.check_type("tag_name", tag_name)

        self.log.debug(f"id short-circuit for {self.selector['id'].value!r}")
        element = self._find_one("id", self.selector["id"].value)
        if element is None or tag_name is None:
            return element
        if not self.element_validator.validate(element, {"tag_name": tag_name}):
            return None
        return element

    def _find_first_by_one(self) -> Optional[NativeElement]:
        how, what = next(iter(self.selector.items()))
        self.selector_builder.check_type(how, what)

        if how in WD_FINDERS and is_text(what):
            return self._find_one(how, what.value)
        if how in WD_FINDERS and is_pattern(what):
            self.log.debug(f"scanning all elements for {how}={what}")
            return next((el for el in self._all_elements() if what.matches(fetch_value(el, how))), None)
        return self._find_first_by_multiple()

    def _find_first_by_multiple(self) -> Optional[NativeElement]:
        selector = self.selector_builder.normalize(self.selector)

        index = None if "adjacent" in selector else selector.get("index")
        visible = selector.get("visible")
        selector = selector.without("visible") if "adjacent" in selector else selector.without("index", "visible")
        needs_filter = (index is not None and index != 0) or visible is not None

        compiled = self.selector_builder.compile(selector)
        if compiled is not None:
            how, what = compiled
            self.log.debug(f"compiled to {how}: {what}")
            if needs_filter:
                return filter_elements(self._find_all(how, what), visible, index, LookupMode.SINGLE)
            return self._find_one(how, what)

        if needs_filter:
            found = self._find_by_regexp_selector(selector, LookupMode.MULTIPLE)
            return filter_elements(found, visible, index, LookupMode.SINGLE)
        return self._find_by_regexp_selector(selector, LookupMode.SINGLE)

    # ---------- Multiple results ----------

    def _find_all_by_one(self) -> List[NativeElement]:
        how, what = next(iter(self.selector.items()))
        self.selector_builder.check_type(how, what)

        if how in WD_FINDERS and is_text(what):
            return self._find_all(how, what.value)
        if how in WD_FINDERS and is_pattern(what):
            self.log.debug(f"scanning all elements for {how}={what}")
            return [el for el in self._all_elements() if what.matches(fetch_value(el, how))]
        return self._find_all_by_multiple()

    def _find_all_by_multiple(self) -> List[NativeElement]:
        selector = self.selector_builder.normalize(self.selector)
        visible = selector.get("visible")
        selector = selector.without("visible")

        if "index" in selector:
            raise ValueError("can't locate all elements by index")

        compiled = self.selector_builder.compile(selector)
        if compiled is not None:
            self.log.debug(f"compiled to {compiled[0]}: {compiled[1]}")
            found = self._find_all(*compiled)
        else:
            found = self._find_by_regexp_selector(selector, LookupMode.MULTIPLE)
        return filter_elements(found, visible, None, LookupMode.MULTIPLE)

    # ---------- Regex fallback ----------

    def _find_by_regexp_selector(self, selector: Selector, mode: LookupMode):
        scope = self.query_scope.native_handle()
        rest, patterns = selector.split_patterns()

        if "label" in patterns and self.selector_builder.supports_label_semantics():
            label = self._label_from_text(patterns["label"])
            patterns = patterns.without("label")
            if label is None:
                self.log.debug("no <label> matched; nothing to locate")
                return None if mode is LookupMode.SINGLE else []
            label_for = label.attribute("for")
            if label_for:
                rest = rest.merged({"id": label_for})
            else:
                scope = label

        compiled = self.selector_builder.compile(rest)
        if compiled is None:
            raise LocatorError(f"internal error: unable to build a native query from {rest!r}")

        how, what = compiled
        if how == "xpath" and self.convert_regexp_to_contains:
            what = self._with_contains_predicates(what, patterns)
        self.log.debug(f"fallback query {how}: {what}; filtering by {patterns!r}")

        candidates = self._find_all(how, what, scope)
        matching = (el for el in candidates if matches_selector(el, patterns))
        if mode is LookupMode.SINGLE:
            return next(matching, None)
        return list(matching)

    def _with_contains_predicates(self, xpath: str, patterns: Selector) -> str:
        for key, pattern in patterns.items():
            if key in _NO_PREDICATE_KEYS:
                continue
            attribute = "class" if key == "class_name" else key.replace("_", "-")
            predicates = [
                f"contains(@{attribute}, {xpath_support.escape(lit)})" for lit in regexp_literals(pattern)
            ]
            if predicates:
                xpath = f"({xpath})[{' and '.join(predicates)}]"
        return xpath

    def _label_from_text(self, text: Pattern) -> Optional[NativeElement]:
        for label in self._find_all("tag_name", "label"):
            if text.matches(fetch_value(label, "text")):
                return label
        return None

    # ---------- Native calls ----------

    def _find_one(self, how: str, what: str, scope: Optional[NativeFinder] = None) -> Optional[NativeElement]:
        scope = scope or self.query_scope.native_handle()
        try:
            return scope.find_element(how, what)
        except NoSuchElementError:
            return None

    def _find_all(self, how: str, what: str, scope: Optional[NativeFinder] = None) -> List[NativeElement]:
        scope = scope or self.query_scope.native_handle()
        return list(scope.find_elements(how, what))

    def _all_elements(self) -> List[NativeElement]:
        return self._find_all("xpath", ".//*")


# ---------- Convenience ----------


def locate(selector: Mapping[str, Any], scope: QueryScope, **kwargs: Any) -> Optional[NativeElement]:
    """Resolve `selector` within `scope` to its first matching element (or None)."""
    return ElementLocator(scope, selector, **kwargs).locate()


def locate_all(selector: Mapping[str, Any], scope: QueryScope, **kwargs: Any) -> List[NativeElement]:
    """Resolve `selector` within `scope` to all matching elements."""
    return ElementLocator(scope, selector, **kwargs).locate_all()


__all__ = [
    "ElementLocator",
    "LookupMode",
    "fetch_value",
    "filter_elements",
    "matches_selector",
    "regexp_literals",
    "locate",
    "locate_all",
]
