"""Size of the share URL a state would produce, against the URL budget."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

from ..config import DEFAULT_BASE_URL, DEFAULT_FRAGMENT_MARKER, DEFAULT_MAX_URL_BYTES, ShareConfig
from ..errors import CapacityExceededError
from ..num_utils import round_half_up
from .codec import DEFAULT_COMPRESSION_LEVEL, to_share_url
from .schema import State

MAX_URL_BYTES = DEFAULT_MAX_URL_BYTES

CapacityLevel = Literal["ok", "warn", "danger"]


@dataclass(frozen=True)
class CapacityReport:
    size_bytes: int
    limit_bytes: int
    percent: int
    level: CapacityLevel
    over_limit: bool

    def describe(self) -> str:
        if self.over_limit:
            return (
                f"URL capacity: over limit ({round_half_up(self.size_bytes / 1024)}KB / "
                f"{round_half_up(self.limit_bytes / 1024)}KB)"
            )
        return f"URL capacity: {self.percent}%"


def estimate_bytes(
    state: State | Mapping[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    *,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> int:
    """UTF-8 byte length of the full share URL (base plus payload)."""

    url = to_share_url(state, base_url, marker=marker, level=level)
    return len(url.encode("utf-8"))


def assess_capacity(
    state: State | Mapping[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    limit: int = MAX_URL_BYTES,
    *,
    warn_percent: int = 60,
    danger_percent: int = 80,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> CapacityReport:
    """Measure ``state`` and grade it; enforcing the budget is up to the caller."""

    size = estimate_bytes(state, base_url, marker=marker, level=level)
    percent = min(100, round_half_up(size / limit * 100)) if limit > 0 else 100
    over_limit = size > limit
    grade: CapacityLevel = "ok"
    if over_limit or percent > danger_percent:
        grade = "danger"
    elif percent > warn_percent:
        grade = "warn"
    return CapacityReport(
        size_bytes=size,
        limit_bytes=limit,
        percent=percent,
        level=grade,
        over_limit=over_limit,
    )


def assess_with_config(
    state: State | Mapping[str, Any], config: ShareConfig, base_url: str | None = None
) -> CapacityReport:
    return assess_capacity(
        state,
        base_url or config.base_url,
        config.max_url_bytes,
        warn_percent=config.warn_percent,
        danger_percent=config.danger_percent,
        marker=config.fragment_marker,
        level=config.compression_level,
    )


def ensure_within_budget(
    state: State | Mapping[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    limit: int = MAX_URL_BYTES,
    *,
    marker: str = DEFAULT_FRAGMENT_MARKER,
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> int:
    """Return the URL size, raising :class:`CapacityExceededError` over ``limit``."""

    size = estimate_bytes(state, base_url, marker=marker, level=level)
    if size > limit:
        raise CapacityExceededError(size, limit)
    return size


def ensure_within_config(
    state: State | Mapping[str, Any], config: ShareConfig, base_url: str | None = None
) -> int:
    """:func:`ensure_within_budget` measured the way :func:`assess_with_config` does."""

    return ensure_within_budget(
        state,
        base_url or config.base_url,
        config.max_url_bytes,
        marker=config.fragment_marker,
        level=config.compression_level,
    )
