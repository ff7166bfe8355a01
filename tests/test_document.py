from __future__ import annotations

import pytest

from pinment.document import Box, Document, StaticLayout
from pinment.errors import InvalidLocatorError


def test_fragment_gets_html_and_body() -> None:
    doc = Document.from_html("<p>one</p><p>two</p>")
    assert doc.body is not None
    assert all(p.parent is doc.body for p in doc.select("p"))
    assert doc.soup.html.body is doc.body


def test_head_stays_outside_body() -> None:
    doc = Document.from_html("<html><head><title>t</title></head><p>x</p></html>")
    assert doc.select("title")[0].parent.name == "head"
    assert doc.select("p")[0].parent is doc.body


def test_is_root(page, find_one) -> None:
    doc = page("<div>x</div>")
    assert doc.is_root(None)
    assert doc.is_root(doc.soup)
    assert doc.is_root(doc.soup.html)
    assert doc.is_root(doc.body)
    assert not doc.is_root(find_one(doc, "div"))


@pytest.mark.parametrize("locator", ["", "   ", "[[[", "div >", None])
def test_select_raises_for_bad_locators(page, locator) -> None:
    with pytest.raises(InvalidLocatorError):
        page("<div></div>").select(locator)


def test_select_children_only_looks_one_level_down(page, find_one) -> None:
    doc = page("<div><span>a</span><b><span>b</span></b></div>")
    div = find_one(doc, "div")
    assert [s.get_text() for s in doc.select_children(div, "span")] == ["a"]


def test_box_geometry() -> None:
    box = Box(10, 20, 30, 40)
    assert (box.right, box.bottom) == (40, 60)
    assert box.contains(10, 20)
    assert not box.contains(40, 20)
    assert box.translate(-10, 5) == Box(0, 25, 30, 40)
    with pytest.raises(ValueError):
        Box.from_sequence([1, 2, 3])
    with pytest.raises(ValueError):
        Box.from_sequence([0, 0, -1, 5])


def test_geometry_locators_must_be_unique(page) -> None:
    doc = page("<p>a</p><p>b</p>")
    with pytest.raises(InvalidLocatorError):
        StaticLayout.from_geometry(doc, {"p": [0, 0, 1, 1]})
    with pytest.raises(InvalidLocatorError):
        StaticLayout.from_geometry(doc, {"#missing": [0, 0, 1, 1]})


def test_bounding_box_is_in_viewport_coordinates(review_page, review_layout, find_one) -> None:
    heading = find_one(review_page, "h1")
    review_layout.scroll_to(20, 30)
    assert review_layout.scroll_offset() == (20.0, 30.0)
    assert review_layout.bounding_box(heading) == Box(80, 20, 400, 40)


def test_element_at_returns_topmost_interactive_node(review_page, review_layout, find_one) -> None:
    overlay = find_one(review_page, "#pinment-overlay")
    heading = find_one(review_page, "h1")
    assert review_layout.element_at(300, 70) is overlay
    review_layout.set_interactive(overlay, False)
    assert review_layout.element_at(300, 70) is heading
    review_layout.set_interactive(find_one(review_page, "main"), False)
    assert review_layout.element_at(300, 70) is None


def test_load_geometry_file(page, tmp_path, find_one) -> None:
    doc = page('<div id="a">x</div>')
    path = tmp_path / "geometry.yml"
    path.write_text('boxes:\n  "#a": [0, 100, 50, 50]\nscroll: [0, 90]\n', encoding="utf-8")
    layout = StaticLayout.load(doc, path)
    assert layout.element_at(10, 20) is find_one(doc, "#a")

    path.write_text("- not a mapping\n", encoding="utf-8")
    with pytest.raises(ValueError):
        StaticLayout.load(doc, path)
