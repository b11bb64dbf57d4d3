# locatorkit/selectors/scope.py
from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

# Strategies every native finder understands.
WD_FINDERS = frozenset({
    "class",
    "class_name",
    "css",
    "id",
    "link",
    "link_text",
    "name",
    "partial_link_text",
    "tag_name",
    "xpath",
})


@runtime_checkable
class NativeFinder(Protocol):
    """Locate primitive of a page or an element."""

    def find_element(self, how: str, what: str) -> "NativeElement":
        """Return the first match or raise NoSuchElementError."""
        ...

    def find_elements(self, how: str, what: str) -> List["NativeElement"]:
        """Return all matches in document order (possibly empty)."""
        ...


@runtime_checkable
class NativeElement(NativeFinder, Protocol):
    @property
    def text(self) -> str: ...

    @property
    def tag_name(self) -> str: ...

    def attribute(self, name: str) -> Optional[str]: ...

    def is_displayed(self) -> bool: ...


@runtime_checkable
class QueryScope(Protocol):
    """Anything lookups can be issued against: a page, a frame or an element."""

    def native_handle(self) -> NativeFinder: ...


__all__ = ["WD_FINDERS", "NativeFinder", "NativeElement", "QueryScope"]
