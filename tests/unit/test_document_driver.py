import pytest

from locatorkit.drivers.document import HtmlDocument
from locatorkit.drivers.strategies import translate
from locatorkit.selectors.errors import NoSuchElementError, StaleElementReferenceError


def test_text_collapses_whitespace(make_doc):
    doc = make_doc("<p id='p'>Hello   <b>big</b>\n   world</p>")
    assert doc.find_element("id", "p").text == "Hello big world"


def test_text_puts_blocks_on_their_own_line(make_doc):
    doc = make_doc("<div id='d'><p>One</p><p>Two</p></div>")
    assert doc.find_element("id", "d").text == "One\nTwo"


def test_text_skips_hidden_descendants(make_doc):
    doc = make_doc("<div id='d'>Shown<span style='display:none'>Hidden</span><script>x()</script></div>")
    assert doc.find_element("id", "d").text == "Shown"


@pytest.mark.parametrize(
    "markup,displayed",
    [
        ("<div id='e'>x</div>", True),
        ("<div id='e' hidden>x</div>", False),
        ("<div id='e' style='visibility: hidden'>x</div>", False),
        ("<div id='e' style='DISPLAY:NONE'>x</div>", False),
        ("<input id='e' type='hidden'>", False),
        ("<div style='display:none'><span id='e'>x</span></div>", False),
    ],
)
def test_is_displayed(make_doc, markup, displayed):
    el = make_doc(markup).find_element("id", "e")
    assert el.is_displayed() is displayed
    if not displayed and el.tag_name != "input":
        assert el.text == ""


def test_element_scope_excludes_itself(make_doc):
    doc = make_doc("<div class='x' id='outer'><div class='x' id='inner'></div></div>")
    outer = doc.find_element("id", "outer")

    assert [e.attribute("id") for e in doc.find_elements("css", ".x")] == ["outer", "inner"]
    assert [e.attribute("id") for e in outer.find_elements("css", ".x")] == ["inner"]


def test_tag_name_strategy_is_case_insensitive(make_doc):
    doc = make_doc("<ul><li>a</li><li>b</li></ul>")
    assert len(doc.find_elements("tag_name", "LI")) == 2


def test_find_element_raises_when_missing(make_doc):
    with pytest.raises(NoSuchElementError):
        make_doc("<p></p>").find_element("id", "nope")
    assert make_doc("<p></p>").find_elements("id", "nope") == []


def test_invalid_queries_raise_value_error(make_doc):
    doc = make_doc("<p></p>")
    with pytest.raises(ValueError):
        doc.find_elements("css", "p[")
    with pytest.raises(ValueError):
        doc.find_elements("xpath", "//p[")


def test_xpath_results_that_are_not_elements_are_dropped(make_doc):
    doc = make_doc("<p id='a'>t</p>")
    assert doc.find_elements("xpath", "//p/@id") == []


def test_detached_element_is_stale(make_doc):
    doc = make_doc("<div id='d'>x</div>")
    el = doc.find_element("id", "d")
    el.node.getparent().remove(el.node)

    with pytest.raises(StaleElementReferenceError):
        _ = el.text
    with pytest.raises(StaleElementReferenceError):
        el.attribute("id")


def test_elements_compare_by_node(make_doc):
    doc = make_doc("<p id='a'>t</p>")
    assert doc.find_element("id", "a") == doc.find_element("tag_name", "p")
    assert len({doc.find_element("id", "a"), doc.find_element("tag_name", "p")}) == 1


def test_from_file(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<html><body><h1 id='t'>Title</h1></body></html>", encoding="utf-8")
    doc = HtmlDocument.from_file(page)
    assert doc.find_element("id", "t").text == "Title"
    assert doc.root.tag_name == "html"

    with pytest.raises(FileNotFoundError):
        HtmlDocument.from_file(tmp_path / "missing.html")


def test_translate():
    assert translate("id", "a'b") == ("xpath", ".//*[@id=\"a'b\"]")
    assert translate("css", "div > p") == ("css", "div > p")
    assert translate("link_text", "Docs") == ("xpath", ".//a[normalize-space()='Docs']")
    assert translate("tag_name", "DIV") == ("xpath", ".//*[local-name()='div']")
    with pytest.raises(ValueError):
        translate("accessibility_id", "x")
