# locatorkit/selectors/xpath_support.py
from __future__ import annotations

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZÀÁÂÃÄÅÆÇÈÉÊËÌÍÎÏÐÑÒÓÔÕÖØÙÚÛÜÝÞŸŽŠŒ"
_LOWER = "abcdefghijklmnopqrstuvwxyzàáâãäåæçèéêëìíîïðñòóôõöøùúûüýþÿžšœ"


def escape(value: str) -> str:
    """Quote `value` as an XPath 1.0 string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    # Contains both quotes - use concat
    parts = value.split("'")
    return "concat('" + "', \"'\", '".join(parts) + "')"


def downcase(expression: str) -> str:
    """Lower-case an XPath expression (XPath 1.0 has no lower-case())."""
    return f"translate({expression},'{_UPPER}','{_LOWER}')"
