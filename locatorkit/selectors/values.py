# locatorkit/selectors/values.py
from __future__ import annotations

"""Selector values
------------------
Selectors map locate-keys to values. String and regular-expression values are
wrapped in tagged types (`Text` / `Pattern`) so lookups can branch on
`value.kind` instead of probing Python types at every step.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Iterator, Mapping, Optional, Tuple


class ValueKind(str, Enum):
    TEXT = "text"
    PATTERN = "pattern"


@dataclass(frozen=True)
class Text:
    value: str
    kind: ClassVar[ValueKind] = ValueKind.TEXT

    def matches(self, actual: Optional[str]) -> bool:
        return actual == self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Pattern:
    regex: re.Pattern
    kind: ClassVar[ValueKind] = ValueKind.PATTERN

    @property
    def source(self) -> str:
        return self.regex.pattern

    @property
    def ignore_case(self) -> bool:
        return bool(self.regex.flags & re.IGNORECASE)

    @property
    def verbose(self) -> bool:
        return bool(self.regex.flags & re.VERBOSE)

    def matches(self, actual: Optional[str]) -> bool:
        return actual is not None and self.regex.search(actual) is not None

    def __str__(self) -> str:
        return f"/{self.source}/"


def is_text(value: Any) -> bool:
    return getattr(value, "kind", None) is ValueKind.TEXT


def is_pattern(value: Any) -> bool:
    return getattr(value, "kind", None) is ValueKind.PATTERN


def coerce_value(value: Any) -> Any:
    """Wrap raw `str` / compiled regex values; everything else passes through."""
    if isinstance(value, (Text, Pattern)):
        return value
    if isinstance(value, str):
        return Text(value)
    if isinstance(value, re.Pattern):
        return Pattern(value)
    return value


_REGEX_LITERAL = re.compile(r"\A/(?P<source>.*)/(?P<flags>[imsx]*)\Z", re.DOTALL)
_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


def parse_regex_literal(raw: str) -> Optional[Pattern]:
    """
    Parse `/source/flags` notation used in catalogs and on the command line.
    Returns None when `raw` is not written in that notation.
    """
    m = _REGEX_LITERAL.match(raw)
    if not m or not m.group("source"):
        return None
    flags = 0
    for ch in m.group("flags"):
        flags |= _FLAG_MAP[ch]
    try:
        return Pattern(re.compile(m.group("source"), flags))
    except re.error as exc:
        raise ValueError(f"invalid regular expression {raw!r}: {exc}") from exc


class Selector(Mapping[str, Any]):
    """
    Immutable, ordered locate-key -> value mapping.

    Derived selectors are produced with `without` / `merged`; the original is
    never changed, so one instance can be shared between lookups.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        data = dict(entries or {})
        data.update(kwargs)
        self._entries = {str(k): coerce_value(v) for k, v in data.items()}

    @classmethod
    def of(cls, value: Mapping[str, Any]) -> "Selector":
        return value if isinstance(value, Selector) else cls(value)

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {_show(v)}" for k, v in self._entries.items())
        return f"Selector({{{inner}}})"

    def without(self, *keys: str) -> "Selector":
        return Selector({k: v for k, v in self._entries.items() if k not in keys})

    def merged(self, entries: Mapping[str, Any]) -> "Selector":
        data = dict(self._entries)
        data.update(entries)
        return Selector(data)

    def has_patterns(self) -> bool:
        return any(is_pattern(v) for v in self._entries.values())

    def split_patterns(self) -> Tuple["Selector", "Selector"]:
        """Return (non-pattern entries, pattern entries)."""
        rest = {k: v for k, v in self._entries.items() if not is_pattern(v)}
        patterns = {k: v for k, v in self._entries.items() if is_pattern(v)}
        return Selector(rest), Selector(patterns)


def _show(value: Any) -> str:
    if is_text(value):
        return repr(value.value)
    if is_pattern(value):
        return str(value)
    return repr(value)


__all__ = [
    "ValueKind",
    "Text",
    "Pattern",
    "Selector",
    "is_text",
    "is_pattern",
    "coerce_value",
    "parse_regex_literal",
]
