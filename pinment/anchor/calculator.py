"""Turn a click into anchor data for a new pin."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from bs4 import Tag

from ..config import AppConfig
from ..document.layout import Layout
from ..document.tree import Document
from ..logging_utils import get_logger
from ..num_utils import clamp, round_half_up
from ..state.schema import Pin
from .locator import LocatorSynthesizer

log = get_logger("anchor.calculator")


@dataclass(frozen=True)
class Anchor:
    s: Optional[str]
    ox: Optional[float]
    oy: Optional[float]
    fx: int
    fy: int

    @property
    def is_structural(self) -> bool:
        return self.s is not None

    def as_pin_fields(self) -> dict[str, Any]:
        return {"s": self.s, "ox": self.ox, "oy": self.oy, "fx": self.fx, "fy": self.fy}

    def to_pin(self, pin_id: int, text: str = "", *, author: str | None = None) -> Pin:
        fields: dict[str, Any] = {"id": pin_id, **self.as_pin_fields(), "text": text}
        if author is not None:
            fields["author"] = author
        return Pin(**fields)


def compute_anchor(
    document: Document,
    layout: Layout,
    client_x: float,
    client_y: float,
    obstructions: Iterable[Tag] = (),
    *,
    config: AppConfig | None = None,
) -> Anchor:
    """Anchor the point ``(client_x, client_y)`` to the node beneath it.

    ``obstructions`` (pin markers, overlays) are made non-interactive for
    the hit test so it reaches page content, and are restored afterwards
    even when the hit test raises.
    """

    config = config or AppConfig()
    scroll_x, scroll_y = layout.scroll_offset()
    fx = round_half_up(client_x + scroll_x)
    fy = round_half_up(client_y + scroll_y)

    node = _hit_test(layout, client_x, client_y, list(obstructions))
    if node is None or document.is_root(node):
        return Anchor(s=None, ox=None, oy=None, fx=fx, fy=fy)

    locator = LocatorSynthesizer(document, config.locator).synthesize(node)
    if locator is None:
        log.debug("No locator for <{}>, storing pixel position only", node.name)
        return Anchor(s=None, ox=None, oy=None, fx=fx, fy=fy)

    box = layout.bounding_box(node)
    precision = config.anchor.ratio_precision
    if box is None:
        ox = oy = 0.5
    else:
        ox = _ratio(client_x - box.left, box.width, precision)
        oy = _ratio(client_y - box.top, box.height, precision)
    return Anchor(s=locator, ox=ox, oy=oy, fx=fx, fy=fy)


def _hit_test(
    layout: Layout, client_x: float, client_y: float, obstructions: list[Tag]
) -> Tag | None:
    previous = [(node, layout.is_interactive(node)) for node in obstructions]
    for node in obstructions:
        layout.set_interactive(node, False)
    try:
        return layout.element_at(client_x, client_y)
    finally:
        for node, interactive in previous:
            layout.set_interactive(node, interactive)


def _ratio(offset: float, extent: float, precision: int) -> float:
    if extent <= 0:
        return 0.5
    return float(round_half_up(clamp(offset / extent, 0.0, 1.0), precision))
