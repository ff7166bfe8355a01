"""Wire codec for annotation states: share URLs and JSON files.

Share payloads are compact JSON, deflated with zlib and written in
unpadded URL-safe base64, so the alphabet is ``[A-Za-z0-9_-]`` and the
payload can follow ``#data=`` without any percent-encoding. JSON export
is plain, pretty and uncompressed for sets too large for a URL.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import zlib
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import unquote

from ..config import (
    DEFAULT_BASE_URL,
    DEFAULT_FRAGMENT_MARKER,
    ShareConfig,
)
from ..logging_utils import get_logger
from .schema import State
from .validator import validate

DEFAULT_COMPRESSION_LEVEL = 9
DEFAULT_MAX_DECODED_BYTES = 1024 * 1024

_PAYLOAD_RE = re.compile(r"[A-Za-z0-9_-]*")

log = get_logger("state.codec")


def compact_json(payload: Any) -> str:
    """Dump JSON with no whitespace, keeping non-ASCII text as-is."""

    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def encode(state: State | Mapping[str, Any], *, level: int = DEFAULT_COMPRESSION_LEVEL) -> str:
    raw = compact_json(_wire(state)).encode("utf-8")
    compressed = zlib.compress(raw, level)
    return base64.urlsafe_b64encode(compressed).rstrip(b"=").decode("ascii")


def decode(
    payload: str | None, *, max_bytes: int = DEFAULT_MAX_DECODED_BYTES
) -> dict[str, Any] | None:
    """Reverse :func:`encode`. Corrupt input gives ``None``, never an error."""

    if not isinstance(payload, str):
        return None
    text = unquote(payload.strip()).rstrip("=")
    if not text or not _PAYLOAD_RE.fullmatch(text):
        log.debug("Payload rejected: empty or outside the URL-safe alphabet")
        return None
    try:
        compressed = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        log.debug("Payload rejected: bad base64 ({})", exc)
        return None
    raw = _inflate(compressed, max_bytes)
    if raw is None:
        return None
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        log.debug("Payload rejected: bad JSON ({})", exc)
        return None
    if not isinstance(data, dict):
        log.debug("Payload rejected: JSON root is {}", type(data).__name__)
        return None
    return data


def to_share_url(
    state: State | Mapping[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    *,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> str:
    base = base_url.split("#", 1)[0]
    return f"{base}{marker}{encode(state, level=level)}"


def from_share_url(
    url: str | None,
    *,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    max_bytes: int = DEFAULT_MAX_DECODED_BYTES,
) -> dict[str, Any] | None:
    """Decode the payload behind ``#data=`` in ``url``; ``None`` otherwise."""

    if not isinstance(url, str):
        return None
    if "#" not in url:
        # The whole link may have been percent-encoded on the way in.
        url = unquote(url)
    _, sep, fragment = url.partition("#")
    if not sep:
        return None
    return _decode_fragment("#" + fragment, marker, max_bytes)


def from_fragment(
    fragment: str | None,
    *,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    max_bytes: int = DEFAULT_MAX_DECODED_BYTES,
) -> State | None:
    """Decode and validate a location hash such as ``#data=...``."""

    if not isinstance(fragment, str):
        return None
    raw = _decode_fragment(fragment, marker, max_bytes)
    if raw is None:
        return None
    return validate(raw)


def to_json(state: State | Mapping[str, Any]) -> str:
    return json.dumps(_wire(state), ensure_ascii=False, indent=2, allow_nan=False)


def from_json(text: str | bytes | None) -> State | None:
    """Parse exported JSON and validate it (v1 files are migrated)."""

    if text is None:
        return None
    try:
        raw = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        log.debug("JSON import rejected: {}", exc)
        return None
    return validate(raw)


def write_json(path: Path | str, state: State | Mapping[str, Any]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(to_json(state) + "\n", encoding="utf-8")
    return target


def read_json(path: Path | str) -> State | None:
    return from_json(Path(path).read_text(encoding="utf-8"))


class ShareCodec:
    """The share functions bound to one :class:`ShareConfig`."""

    def __init__(self, config: ShareConfig | None = None) -> None:
        self.config = config or ShareConfig()

    def encode(self, state: State | Mapping[str, Any]) -> str:
        return encode(state, level=self.config.compression_level)

    def decode(self, payload: str | None) -> dict[str, Any] | None:
        return decode(payload, max_bytes=self.config.max_decoded_bytes)

    def to_share_url(
        self, state: State | Mapping[str, Any], base_url: str | None = None
    ) -> str:
        return to_share_url(
            state,
            base_url or self.config.base_url,
            marker=self.config.fragment_marker,
            level=self.config.compression_level,
        )

    def from_share_url(self, url: str | None) -> dict[str, Any] | None:
        return from_share_url(
            url,
            marker=self.config.fragment_marker,
            max_bytes=self.config.max_decoded_bytes,
        )

    def open_share_url(self, url: str | None) -> State | None:
        """Decode and validate in one step."""

        raw = self.from_share_url(url)
        if raw is None:
            return None
        return validate(raw)


def _wire(state: State | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(state, State):
        return state.to_wire()
    return dict(state)


def _decode_fragment(fragment: str, marker: str, max_bytes: int) -> dict[str, Any] | None:
    if not fragment.startswith(marker):
        return None
    return decode(fragment[len(marker):], max_bytes=max_bytes)


def _inflate(compressed: bytes, max_bytes: int) -> bytes | None:
    inflater = zlib.decompressobj()
    try:
        raw = inflater.decompress(compressed, max_bytes)
    except zlib.error as exc:
        log.debug("Payload rejected: {}", exc)
        return None
    if inflater.unconsumed_tail:
        log.debug("Payload rejected: inflates past {} bytes", max_bytes)
        return None
    if not inflater.eof or inflater.unused_data:
        log.debug("Payload rejected: truncated or trailing data")
        return None
    return raw
