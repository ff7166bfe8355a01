"""Geometry collaborators: bounding boxes, scrolling and hit testing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

import yaml
from bs4 import Tag

from ..errors import InvalidLocatorError
from .tree import Document


@dataclass(frozen=True)
class Box:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def translate(self, dx: float, dy: float) -> "Box":
        return Box(self.left + dx, self.top + dy, self.width, self.height)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Box":
        if len(values) != 4:
            raise ValueError(f"Box needs [left, top, width, height], got {values!r}")
        left, top, width, height = (float(v) for v in values)
        if width < 0 or height < 0:
            raise ValueError(f"Box size must be non-negative, got {values!r}")
        return cls(left, top, width, height)


class Layout(Protocol):
    """What the anchor layer needs from a rendered page.

    Boxes are in viewport coordinates; adding :meth:`scroll_offset` gives
    page coordinates.
    """

    def bounding_box(self, node: Tag) -> Box | None: ...

    def scroll_offset(self) -> tuple[float, float]: ...

    def element_at(self, client_x: float, client_y: float) -> Tag | None: ...

    def is_interactive(self, node: Tag) -> bool: ...

    def set_interactive(self, node: Tag, interactive: bool) -> None: ...


class StaticLayout:
    """In-memory layout with page-coordinate boxes assigned per node.

    Used for offline tooling and tests; ``set_box`` simulates reflow and
    ``scroll_to`` moves the viewport.
    """

    def __init__(
        self,
        document: Document,
        *,
        scroll: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self._document = document
        self._boxes: dict[int, tuple[Tag, Box]] = {}
        self._inert: dict[int, Tag] = {}
        self._scroll = (float(scroll[0]), float(scroll[1]))

    @classmethod
    def from_geometry(
        cls,
        document: Document,
        boxes: Mapping[str, Sequence[float]],
        *,
        scroll: Sequence[float] | None = None,
    ) -> "StaticLayout":
        """Build a layout from ``{locator: [left, top, width, height]}``."""

        layout = cls(document, scroll=_scroll_pair(scroll))
        for locator, values in boxes.items():
            matches = document.select(locator)
            if len(matches) != 1:
                raise InvalidLocatorError(
                    locator, f"geometry locator matched {len(matches)} nodes"
                )
            layout.set_box(matches[0], Box.from_sequence(values))
        return layout

    @classmethod
    def load(cls, document: Document, path: Path | str) -> "StaticLayout":
        """Load a YAML geometry file with ``boxes`` and optional ``scroll``."""

        with Path(path).open("r", encoding="utf-8") as fh:
            data: Any = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Geometry file {path} must contain a mapping")
        boxes = data.get("boxes") or {}
        if not isinstance(boxes, dict):
            raise ValueError(f"Geometry file {path}: 'boxes' must be a mapping")
        return cls.from_geometry(document, boxes, scroll=data.get("scroll"))

    def set_box(self, node: Tag, box: Box) -> None:
        self._boxes[id(node)] = (node, box)

    def clear_box(self, node: Tag) -> None:
        self._boxes.pop(id(node), None)

    def scroll_to(self, x: float, y: float) -> None:
        self._scroll = (float(x), float(y))

    def scroll_offset(self) -> tuple[float, float]:
        return self._scroll

    def bounding_box(self, node: Tag) -> Box | None:
        page_box = self._page_box(node)
        if page_box is None:
            return None
        return page_box.translate(-self._scroll[0], -self._scroll[1])

    def element_at(self, client_x: float, client_y: float) -> Tag | None:
        page_x = client_x + self._scroll[0]
        page_y = client_y + self._scroll[1]
        hit: Tag | None = None
        # Later nodes in document order paint above earlier ones, and
        # descendants follow their ancestors, so the last hit is topmost.
        for node in self._document.iter_elements():
            box = self._page_box(node)
            if box is None or not box.contains(page_x, page_y):
                continue
            if not self._receives_pointer(node):
                continue
            hit = node
        return hit

    def is_interactive(self, node: Tag) -> bool:
        return id(node) not in self._inert

    def set_interactive(self, node: Tag, interactive: bool) -> None:
        if interactive:
            self._inert.pop(id(node), None)
        else:
            self._inert[id(node)] = node

    def _page_box(self, node: Tag) -> Box | None:
        entry = self._boxes.get(id(node))
        if entry is None or entry[0] is not node:
            return None
        return entry[1]

    def _receives_pointer(self, node: Tag) -> bool:
        current: Any = node
        while isinstance(current, Tag):
            if id(current) in self._inert:
                return False
            current = current.parent
        return True


def _scroll_pair(values: Sequence[float] | None) -> tuple[float, float]:
    if values is None:
        return (0.0, 0.0)
    if len(values) != 2:
        raise ValueError(f"scroll needs [x, y], got {values!r}")
    return (float(values[0]), float(values[1]))
