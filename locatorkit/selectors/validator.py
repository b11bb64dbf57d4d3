# locatorkit/selectors/validator.py
from __future__ import annotations

from typing import Any, Mapping

from locatorkit.selectors.scope import NativeElement
from locatorkit.selectors.values import Selector, is_text


class ElementValidator:
    """Re-checks constraints a raw xpath/css or id lookup could not enforce."""

    def validate(self, element: NativeElement, selector: Mapping[str, Any]) -> bool:
        selector = Selector.of(selector)
        expected_tag = selector.get("tag_name")
        if expected_tag is None:
            return True

        tag = element.tag_name.lower()
        if is_text(expected_tag):
            if expected_tag.value.lower() != tag:
                return False
        elif not expected_tag.matches(tag):
            return False

        expected_type = selector.get("type")
        if tag == "input" and is_text(expected_type):
            actual = element.attribute("type")
            return (actual or "text").lower() == expected_type.value.lower()
        return True


__all__ = ["ElementValidator"]
