# locatorkit/selectors/loader.py
from __future__ import annotations

"""Selector catalogs
--------------------
Named selectors kept in YAML files, one catalog per page. Values written as
`/source/flags` become regular expressions; `${VAR}` is substituted from the
environment. Multi-document files hold several catalogs.
"""

from pathlib import Path
from typing import Any, Optional, Union
import os
import re

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from locatorkit.selectors.builder import SelectorBuilder
from locatorkit.selectors.values import Selector, parse_regex_literal

# raw queries are never regex literals (an xpath may well start and end with '/')
_RAW_QUERY_KEYS = frozenset({"xpath", "css"})

RawValue = Union[bool, int, str]


def to_selector(entries: dict[str, RawValue]) -> Selector:
    """Build a Selector from catalog entries, turning `/.../` strings into patterns."""
    converted: dict[str, Any] = {}
    for key, value in entries.items():
        if isinstance(value, str) and key not in _RAW_QUERY_KEYS:
            pattern = parse_regex_literal(value)
            converted[key] = pattern if pattern is not None else value
        else:
            converted[key] = value
    return Selector(converted)


# ---------- Models ----------


class Catalog(BaseModel):
    version: str = Field(default="1")
    page: str = Field(..., description="Page key, e.g. 'checkout'")
    description: Optional[str] = None
    selectors: dict[str, dict[str, RawValue]] = Field(default_factory=dict)

    @field_validator("page")
    @classmethod
    def _page_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("page cannot be empty")
        return v

    @field_validator("selectors")
    @classmethod
    def _selectors_valid(cls, v: dict[str, dict[str, RawValue]]) -> dict[str, dict[str, RawValue]]:
        builder = SelectorBuilder(use_label_element=True)
        for name, entries in v.items():
            if not entries:
                raise ValueError(f"selector {name!r} is empty")
            try:
                builder.normalize(to_selector(entries))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"selector {name!r}: {exc}") from exc
        return v

    def selector(self, name: str) -> Selector:
        try:
            return to_selector(self.selectors[name])
        except KeyError:
            raise KeyError(f"unknown selector {name!r} in catalog {self.page!r}") from None


# ---------- Helpers ----------


def _subst_env(obj):
    if isinstance(obj, str):
        def repl(m):
            return os.environ.get(m.group(1), m.group(0))
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}", repl, obj)
    if isinstance(obj, list):
        return [_subst_env(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _subst_env(v) for k, v in obj.items()}
    return obj


def _format_errors(header: str, ve: ValidationError) -> str:
    lines = [header]
    for e in ve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []))
        msg = e.get("msg", "invalid value")
        lines.append(f"  - {loc}: {msg}")
    return "\n".join(lines)


def _infer_page(p: Path) -> str:
    return p.stem


# ---------- Public API ----------


def load_catalog(path: Path | str) -> Catalog:
    """Load a single-document catalog file."""
    catalogs = load_catalogs_file(path)
    if len(catalogs) != 1:
        raise ValueError(f"{path} holds {len(catalogs)} catalogs; use load_catalogs_file")
    return catalogs[0]


def load_catalogs_file(path: Path | str) -> list[Catalog]:
    """Load one or more catalogs from a YAML file (supports multi-document)."""
    cat_path = Path(path)
    if not cat_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {cat_path}")
    try:
        docs = list(yaml.safe_load_all(cat_path.read_text(encoding="utf-8")))
    except yaml.YAMLError as ye:
        raise ValueError(f"YAML parse error in {cat_path}: {ye}") from ye

    out: list[Catalog] = []
    for idx, data in enumerate(docs, start=1):
        if data is None:
            continue
        if not isinstance(data, dict):
            raise ValueError(f"Document {idx} in {cat_path} must be a mapping/object.")
        data = _subst_env(data)
        data.setdefault("page", _infer_page(cat_path))
        try:
            out.append(Catalog.model_validate(data))
        except ValidationError as ve:
            raise ValueError(_format_errors(f"Invalid catalog '{cat_path}' (document {idx}):", ve)) from ve
    if not out:
        raise ValueError(f"No catalog documents found in {cat_path}")
    return out


def find_catalog_files(root: Path, recursive: bool = True) -> list[Path]:
    if recursive:
        return sorted(list(root.rglob("*.yaml")) + list(root.rglob("*.yml")))
    return sorted(list(root.glob("*.yaml")) + list(root.glob("*.yml")))


class CatalogLoader:
    def load_directory(
        self,
        root: Path,
        *,
        recursive: bool = True,
        filter_page: Optional[str] = None,
    ) -> list[Catalog]:
        """Load every valid catalog under `root`; invalid files are skipped."""
        catalogs: list[Catalog] = []
        for fp in find_catalog_files(root, recursive=recursive):
            try:
                found = load_catalogs_file(fp)
            except (OSError, ValueError):
                continue
            catalogs.extend(c for c in found if not filter_page or c.page == filter_page)
        return catalogs


__all__ = [
    "Catalog",
    "CatalogLoader",
    "find_catalog_files",
    "load_catalog",
    "load_catalogs_file",
    "to_selector",
]
