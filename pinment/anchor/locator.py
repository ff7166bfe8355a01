"""Structural locators that re-find a node on a later page load.

A locator is a CSS selector built bottom-up from the target node, one
segment per ancestor, preferring (in order) a stable id, a test id
attribute, a class that is unique among siblings and finally the
``nth-of-type`` position. The result is only returned when a
document-wide query finds exactly the target node; otherwise a plain
positional path is tried, and failing that there is no locator.
"""

from __future__ import annotations

from typing import Any

from bs4 import Tag

from ..config import LocatorPolicy
from ..document.tree import Document
from ..errors import InvalidLocatorError
from ..logging_utils import get_logger
from .stability import is_stable_identifier, stable_classes

SEGMENT_SEPARATOR = ">"

log = get_logger("anchor.locator")


class LocatorSynthesizer:
    def __init__(self, document: Document, policy: LocatorPolicy | None = None) -> None:
        self._document = document
        self._policy = policy or LocatorPolicy()

    def synthesize(self, node: Any) -> str | None:
        if not self._is_anchorable(node):
            return None
        segments: list[str] = []
        current = node
        while current is not None and not self._document.is_root(current):
            segment = self._segment(current)
            segments.insert(0, segment)
            # An id is unique document-wide, nothing above it adds precision.
            if segment.startswith("#"):
                break
            current = current.parent
        locator = SEGMENT_SEPARATOR.join(segments)
        if self.validate(locator, node):
            return locator
        log.debug("Locator {} is ambiguous, trying positional path", locator)
        return self.full_path(node)

    def full_path(self, node: Any) -> str | None:
        """Positional path using only id and ``nth-of-type`` segments."""

        if not self._is_anchorable(node):
            return None
        segments: list[str] = []
        current = node
        while current is not None and not self._document.is_root(current):
            node_id = _attr_text(current, "id")
            if node_id and is_stable_identifier(node_id, self._policy):
                id_segment = "#" + css_escape(node_id)
                # Duplicate ids happen in the wild; only stop on a unique one.
                if self.validate(id_segment, current):
                    segments.insert(0, id_segment)
                    break
            segments.insert(0, _nth_of_type_segment(current))
            current = current.parent
        else:
            # Walked all the way up: pin the path to body (or html for head
            # content) so nested look-alike chains cannot match.
            if isinstance(current, Tag) and current is not self._document.soup:
                segments.insert(0, current.name)
        locator = SEGMENT_SEPARATOR.join(segments)
        if self.validate(locator, node):
            return locator
        log.debug("No unique locator for <{}>", getattr(node, "name", "?"))
        return None

    def validate(self, locator: str | None, expected: Any) -> bool:
        if not locator:
            return False
        try:
            matches = self._document.select(locator)
        except InvalidLocatorError as exc:
            log.debug("{}", exc)
            return False
        return len(matches) == 1 and matches[0] is expected

    def _is_anchorable(self, node: Any) -> bool:
        if not isinstance(node, Tag) or self._document.is_root(node):
            return False
        return self._document.contains(node)

    def _segment(self, node: Tag) -> str:
        node_id = _attr_text(node, "id")
        if node_id and is_stable_identifier(node_id, self._policy):
            return "#" + css_escape(node_id)

        tag = css_escape(node.name.lower())

        for attr in self._policy.test_id_attributes:
            value = _attr_text(node, attr)
            if value:
                return f'{tag}[{attr}="{quote_attribute(value)}"]'

        for cls in stable_classes(node.get("class"), self._policy):
            candidate = f"{tag}.{css_escape(cls)}"
            if self._unique_among_siblings(node, candidate):
                return candidate

        return _nth_of_type_segment(node)

    def _unique_among_siblings(self, node: Tag, candidate: str) -> bool:
        parent = node.parent
        if parent is None:
            return False
        try:
            matches = self._document.select_children(parent, candidate)
        except InvalidLocatorError:
            return False
        return len(matches) == 1 and matches[0] is node


def synthesize(document: Document, node: Any, policy: LocatorPolicy | None = None) -> str | None:
    """Return a locator that uniquely resolves to ``node``, or ``None``."""

    return LocatorSynthesizer(document, policy).synthesize(node)


def validate_locator(document: Document, locator: str | None, expected: Any) -> bool:
    """True when ``locator`` matches exactly one node and it is ``expected``."""

    return LocatorSynthesizer(document).validate(locator, expected)


def nth_of_type_index(node: Tag) -> int:
    index = 1
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag) and sibling.name == node.name:
            index += 1
    return index


def css_escape(value: str) -> str:
    """Serialize an identifier the way ``CSS.escape`` does."""

    out: list[str] = []
    length = len(value)
    for index, ch in enumerate(value):
        code = ord(ch)
        if code == 0:
            out.append("\ufffd")
        elif (
            0x01 <= code <= 0x1F
            or code == 0x7F
            or (index == 0 and ch.isdigit() and ch.isascii())
            or (index == 1 and ch.isdigit() and ch.isascii() and value[0] == "-")
        ):
            out.append(f"\\{code:x} ")
        elif index == 0 and ch == "-" and length == 1:
            out.append("\\-")
        elif code >= 0x80 or ch in "-_" or (ch.isascii() and ch.isalnum()):
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def quote_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute selector."""

    out: list[str] = []
    for ch in value:
        if ch in ('"', "\\"):
            out.append("\\" + ch)
        elif ch in ("\n", "\r", "\f"):
            out.append(f"\\{ord(ch):x} ")
        elif ch == "\x00":
            out.append("\ufffd")
        else:
            out.append(ch)
    return "".join(out)


def _nth_of_type_segment(node: Tag) -> str:
    return f"{css_escape(node.name.lower())}:nth-of-type({nth_of_type_index(node)})"


def _attr_text(node: Tag, name: str) -> str:
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value if isinstance(value, str) else ""
