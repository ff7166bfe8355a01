from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterator, Mapping, Sequence

import pytest
from loguru import logger

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pinment.document import Document, StaticLayout  # noqa: E402

REVIEW_PAGE = """
<!doctype html>
<html>
  <head><title>Review</title></head>
  <body>
    <main id="main">
      <h1 class="title">Heading</h1>
      <p>Body text</p>
    </main>
    <div id="pinment-overlay"></div>
  </body>
</html>
"""

REVIEW_GEOMETRY = {
    "#main": (0, 0, 1000, 800),
    "#main>h1": (100, 50, 400, 40),
    "#main>p": (100, 120, 600, 100),
    "#pinment-overlay": (0, 0, 1000, 2000),
}


@pytest.fixture(autouse=True)
def _reset_loguru() -> Iterator[None]:
    yield
    logger.remove()


@pytest.fixture
def page() -> Callable[[str], Document]:
    def _factory(markup: str) -> Document:
        return Document.from_html(markup)

    return _factory


@pytest.fixture
def review_page() -> Document:
    return Document.from_html(REVIEW_PAGE)


@pytest.fixture
def review_layout(review_page: Document) -> StaticLayout:
    return StaticLayout.from_geometry(review_page, REVIEW_GEOMETRY)


@pytest.fixture
def layout_for() -> Callable[..., StaticLayout]:
    def _factory(
        document: Document,
        boxes: Mapping[str, Sequence[float]],
        scroll: Sequence[float] | None = None,
    ) -> StaticLayout:
        return StaticLayout.from_geometry(document, boxes, scroll=scroll)

    return _factory


@pytest.fixture
def find_one() -> Callable:
    def _find(document: Document, locator: str):
        matches = document.select(locator)
        assert len(matches) == 1, f"{locator!r} matched {len(matches)} nodes"
        return matches[0]

    return _find
