"""HTML document tree and its CSS query primitive."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import soupsieve
from bs4 import BeautifulSoup, Doctype, Tag

from ..errors import InvalidLocatorError

DEFAULT_PARSER = "html.parser"


class Document:
    """A parsed page that can be queried by locator.

    Nodes are plain ``bs4.Tag`` objects. Identity checks use ``is``: Tag
    equality in BeautifulSoup compares markup, so two identical siblings
    are ``==`` but are still different nodes.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        _ensure_body(soup)
        self._soup = soup

    @classmethod
    def from_html(cls, markup: str, parser: str = DEFAULT_PARSER) -> "Document":
        return cls(BeautifulSoup(markup, parser))

    @classmethod
    def from_path(cls, path: Path | str, parser: str = DEFAULT_PARSER) -> "Document":
        text = Path(path).read_text(encoding="utf-8")
        return cls.from_html(text, parser=parser)

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    @property
    def body(self) -> Tag | None:
        return self._soup.body

    def is_root(self, node: object) -> bool:
        """True for the soup itself, the ``html`` element and ``body``."""

        if node is None or node is self._soup:
            return True
        if not isinstance(node, Tag):
            return False
        if node.name == "body":
            return node is self._soup.body
        if node.name == "html":
            return node is self._soup.html
        return False

    def select(self, locator: str) -> list[Tag]:
        """Return every node matching ``locator`` in document order."""

        compiled = _compile(locator)
        return list(compiled.select(self._soup))

    def select_children(self, parent: Tag, locator: str) -> list[Tag]:
        """Return the direct children of ``parent`` matching ``locator``."""

        compiled = _compile(locator)
        return [
            child
            for child in parent.children
            if isinstance(child, Tag) and compiled.match(child)
        ]

    def iter_elements(self) -> Iterator[Tag]:
        yield from self._soup.find_all(True)

    def contains(self, node: Tag) -> bool:
        """True while ``node`` is still attached to this document."""

        current = node
        while current is not None:
            if current is self._soup:
                return True
            current = current.parent
        return False


def _compile(locator: str):
    if not isinstance(locator, str) or not locator.strip():
        raise InvalidLocatorError(str(locator), "empty locator")
    try:
        return soupsieve.compile(locator)
    except Exception as exc:
        raise InvalidLocatorError(locator, str(exc)) from exc


def _ensure_body(soup: BeautifulSoup) -> None:
    # Fragments parsed with html.parser have no html/body wrapper; the locator
    # walk stops at body, so every document gets one.
    if soup.body is not None:
        return
    html = soup.html
    if html is None:
        html = soup.new_tag("html")
        for child in list(soup.contents):
            if isinstance(child, Doctype):
                continue
            html.append(child.extract())
        soup.append(html)
    body = soup.new_tag("body")
    for child in list(html.contents):
        if isinstance(child, Tag) and child.name == "head":
            continue
        body.append(child.extract())
    html.append(body)
