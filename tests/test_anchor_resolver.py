from __future__ import annotations

from pinment.anchor.resolver import Marker, Placement, place_markers, reposition, resolve
from pinment.document import Box
from pinment.state import Pin, create_state


def _pin(pin_id: int = 1, **fields) -> Pin:
    data = {"id": pin_id, "fx": 300, "fy": 70, "text": "note"}
    data.update(fields)
    return Pin(**data)


def test_resolves_to_offset_inside_anchor(review_page, review_layout) -> None:
    pin = _pin(s="#main>h1.title", ox=0.5, oy=0.5)
    assert resolve(review_page, review_layout, pin) == Placement(300, 70, False)


def test_follows_the_node_after_reflow(review_page, review_layout, find_one) -> None:
    pin = _pin(s="#main>h1.title", ox=0.5, oy=0.5)
    review_layout.set_box(find_one(review_page, "h1"), Box(200, 300, 400, 40))
    assert resolve(review_page, review_layout, pin) == Placement(400, 320, False)


def test_position_is_independent_of_scroll(review_page, review_layout) -> None:
    pin = _pin(s="#main>p:nth-of-type(1)", ox=0.0, oy=1.0)
    before = resolve(review_page, review_layout, pin)
    review_layout.scroll_to(0, 500)
    after = resolve(review_page, review_layout, pin)
    assert before == after == Placement(100, 220, False)


def test_missing_ratios_default_to_center(review_page, review_layout) -> None:
    pin = _pin(s="#main>h1.title")
    assert resolve(review_page, review_layout, pin) == Placement(300, 70, False)


def test_pixel_only_pin_is_not_a_fallback(review_page, review_layout) -> None:
    pin = _pin(fx=12, fy=34)
    assert resolve(review_page, review_layout, pin) == Placement(12, 34, False)


def test_broken_anchors_fall_back_to_stored_pixels(review_page, review_layout) -> None:
    for locator in ("#gone", "[[[", "#main>*"):
        pin = _pin(s=locator, ox=0.1, oy=0.1, fx=5, fy=6)
        assert resolve(review_page, review_layout, pin) == Placement(5, 6, True), locator


def test_removed_node_falls_back(review_page, review_layout, find_one) -> None:
    pin = _pin(s="#main>h1.title", ox=0.5, oy=0.5, fx=1, fy=2)
    find_one(review_page, "h1").decompose()
    assert resolve(review_page, review_layout, pin) == Placement(1, 2, True)


def test_node_without_box_falls_back(review_page, review_layout, find_one) -> None:
    pin = _pin(s="#main>h1.title", ox=0.5, oy=0.5, fx=1, fy=2)
    review_layout.clear_box(find_one(review_page, "h1"))
    assert resolve(review_page, review_layout, pin).is_fallback


def test_reposition_updates_marker_in_place(review_page, review_layout, find_one) -> None:
    pin = _pin(s="#main>h1.title", ox=0.5, oy=0.5)
    marker = Marker(pin_id=pin.id)
    assert reposition(marker, review_page, review_layout, pin) is marker
    assert (marker.left, marker.top, marker.is_fallback) == (300, 70, False)

    find_one(review_page, "h1").decompose()
    reposition(marker, review_page, review_layout, pin)
    assert (marker.left, marker.top, marker.is_fallback) == (300, 70, True)


def test_place_markers_keeps_pin_order(review_page, review_layout) -> None:
    state = create_state(
        "https://example.com/",
        1000,
        pins=[
            _pin(2, s="#main>h1.title", ox=0.0, oy=0.0),
            _pin(1, fx=9, fy=9),
            _pin(5, s="#nope", ox=0.5, oy=0.5, fx=7, fy=8),
        ],
    )
    markers = place_markers(review_page, review_layout, state)
    assert markers == [
        Marker(2, 100, 50, False),
        Marker(1, 9, 9, False),
        Marker(5, 7, 8, True),
    ]
