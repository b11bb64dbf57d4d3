# locatorkit/drivers/strategies.py
from __future__ import annotations

from typing import Tuple

from locatorkit.selectors.xpath_support import escape


def translate(how: str, what: str) -> Tuple[str, str]:
    """
    Map a native locate strategy to an ("xpath" | "css", query) pair that
    drivers without strategy support of their own can evaluate.
    Relative xpath queries are evaluated from the scope they are issued against.
    """
    if how == "xpath":
        return "xpath", what
    if how == "css":
        return "css", what
    if how == "id":
        return "xpath", f".//*[@id={escape(what)}]"
    if how == "name":
        return "xpath", f".//*[@name={escape(what)}]"
    if how in ("class", "class_name"):
        token = escape(f" {what} ")
        return "xpath", f".//*[contains(concat(' ', normalize-space(@class), ' '), {token})]"
    if how == "tag_name":
        return "xpath", f".//*[local-name()={escape(what.lower())}]"
    if how in ("link", "link_text"):
        return "xpath", f".//a[normalize-space()={escape(what)}]"
    if how == "partial_link_text":
        return "xpath", f".//a[contains(normalize-space(), {escape(what)})]"
    raise ValueError(f"unsupported locate strategy: {how!r}")
