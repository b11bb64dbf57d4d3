import textwrap

import pytest

from locatorkit.selectors.loader import CatalogLoader, load_catalog, load_catalogs_file, to_selector
from locatorkit.selectors.values import Pattern, Text


def _write(path, body: str):
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


def test_load_catalogs_file_multidoc(tmp_path):
    fp = _write(
        tmp_path / "editor.yaml",
        """
        version: "1"
        page: editor
        selectors:
          save_button:
            tag_name: button
            text: "/^Save$/"
        ---
        page: settings
        selectors:
          rows:
            class: row
            visible: true
            index: 2
        """,
    )

    editor, settings = load_catalogs_file(fp)

    assert editor.page == "editor"
    save = editor.selector("save_button")
    assert save["tag_name"] == Text("button")
    assert isinstance(save["text"], Pattern)
    assert save["text"].source == "^Save$"

    rows = settings.selector("rows")
    assert rows["visible"] is True
    assert rows["index"] == 2


def test_raw_queries_are_not_regex_literals(tmp_path):
    fp = _write(
        tmp_path / "p.yaml",
        """
        selectors:
          root_div:
            xpath: "/html/body/div/"
        """,
    )
    sel = load_catalog(fp).selector("root_div")
    assert sel["xpath"] == Text("/html/body/div/")


def test_page_defaults_to_file_stem(tmp_path):
    fp = _write(tmp_path / "checkout.yml", "selectors:\n  pay:\n    id: pay\n")
    assert load_catalog(fp).page == "checkout"


def test_env_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("SUBMIT_ID", "submit-42")
    fp = _write(
        tmp_path / "form.yaml",
        """
        page: form
        selectors:
          submit:
            id: ${SUBMIT_ID}
            tag_name: button
          untouched:
            id: ${NOT_SET_ANYWHERE_123}
        """,
    )
    catalog = load_catalog(fp)
    assert catalog.selector("submit")["id"] == Text("submit-42")
    assert catalog.selector("untouched")["id"] == Text("${NOT_SET_ANYWHERE_123}")


@pytest.mark.parametrize(
    "entries",
    [
        "index: two",
        "visible: maybe",
        "'data foo': x",
        "adjacent: sideways",
        "text: '/([a-z/'",
    ],
)
def test_invalid_selectors_are_rejected(tmp_path, entries):
    fp = _write(tmp_path / "bad.yaml", f"page: bad\nselectors:\n  broken:\n    {entries}\n")
    with pytest.raises(ValueError) as exc:
        load_catalogs_file(fp)
    assert "bad.yaml" in str(exc.value)


def test_empty_and_missing_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalogs_file(tmp_path / "missing.yaml")

    empty = _write(tmp_path / "empty.yaml", "---\n---\n")
    with pytest.raises(ValueError, match="No catalog documents"):
        load_catalogs_file(empty)


def test_load_catalog_requires_a_single_document(tmp_path):
    fp = _write(tmp_path / "two.yaml", "page: a\n---\npage: b\n")
    with pytest.raises(ValueError):
        load_catalog(fp)


def test_unknown_selector_name(tmp_path):
    fp = _write(tmp_path / "p.yaml", "page: p\nselectors:\n  a:\n    id: a\n")
    with pytest.raises(KeyError):
        load_catalog(fp).selector("b")


def test_load_directory_skips_invalid_files_and_filters(tmp_path):
    _write(tmp_path / "a.yaml", "page: home\nselectors:\n  logo:\n    id: logo\n")
    sub = tmp_path / "nested"
    sub.mkdir()
    _write(sub / "b.yml", "page: cart\nselectors:\n  total:\n    class: total\n")
    _write(tmp_path / "broken.yaml", "page: [unclosed\n")

    loader = CatalogLoader()
    assert sorted(c.page for c in loader.load_directory(tmp_path)) == ["cart", "home"]
    assert [c.page for c in loader.load_directory(tmp_path, recursive=False)] == ["home"]
    assert [c.page for c in loader.load_directory(tmp_path, filter_page="cart")] == ["cart"]


def test_to_selector_keeps_non_strings():
    sel = to_selector({"tag_name": "div", "visible": False, "index": 0, "text": "/save/i"})
    assert sel["visible"] is False
    assert sel["index"] == 0
    assert sel["text"].ignore_case
