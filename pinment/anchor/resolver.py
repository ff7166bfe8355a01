"""Place stored pins back onto the current page."""

from __future__ import annotations

from dataclasses import dataclass

from ..document.layout import Layout
from ..document.tree import Document
from ..errors import InvalidLocatorError
from ..logging_utils import get_logger
from ..state.schema import Pin, State

log = get_logger("anchor.resolver")

CENTER_RATIO = 0.5


@dataclass(frozen=True)
class Placement:
    left: float
    top: float
    is_fallback: bool = False


@dataclass
class Marker:
    """Mutable on-page position of one pin."""

    pin_id: int
    left: float = 0.0
    top: float = 0.0
    is_fallback: bool = False


def resolve(document: Document, layout: Layout, pin: Pin) -> Placement:
    """Page position for ``pin`` from its anchor, or its stored pixels.

    The node is looked up again on every call so the pin follows it through
    reflow. ``is_fallback`` is only set when an anchor existed but broke.
    """

    if pin.s is None:
        return Placement(left=pin.fx, top=pin.fy, is_fallback=False)

    try:
        matches = document.select(pin.s)
    except InvalidLocatorError as exc:
        log.debug("Pin {} locator unusable: {}", pin.id, exc)
        return _fallback(pin)
    if len(matches) != 1:
        log.debug("Pin {} locator matched {} nodes", pin.id, len(matches))
        return _fallback(pin)

    box = layout.bounding_box(matches[0])
    if box is None:
        log.debug("Pin {} anchor node has no box", pin.id)
        return _fallback(pin)

    scroll_x, scroll_y = layout.scroll_offset()
    ox = CENTER_RATIO if pin.ox is None else pin.ox
    oy = CENTER_RATIO if pin.oy is None else pin.oy
    return Placement(
        left=box.left + scroll_x + ox * box.width,
        top=box.top + scroll_y + oy * box.height,
    )


def reposition(marker: Marker, document: Document, layout: Layout, pin: Pin) -> Marker:
    """Move ``marker`` to the current position of ``pin`` (e.g. after resize)."""

    placement = resolve(document, layout, pin)
    marker.left = placement.left
    marker.top = placement.top
    marker.is_fallback = placement.is_fallback
    return marker


def place_markers(document: Document, layout: Layout, state: State) -> list[Marker]:
    """One marker per pin, in display order."""

    markers = []
    for pin in state.pins:
        markers.append(reposition(Marker(pin_id=pin.id), document, layout, pin))
    return markers


def _fallback(pin: Pin) -> Placement:
    return Placement(left=pin.fx, top=pin.fy, is_fallback=True)
