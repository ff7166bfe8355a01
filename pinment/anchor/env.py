"""Compact browser/device descriptor stored with a state for display."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MOBILE_MAX_WIDTH = 768
TABLET_MAX_WIDTH = 1024

# Edge reports a Chrome token too, so it must be checked first.
_BROWSER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("E", re.compile(r"Edg/(\d+)")),
    ("C", re.compile(r"Chrome/(\d+)")),
    ("F", re.compile(r"Firefox/(\d+)")),
    ("S", re.compile(r"Version/(\d+).*Safari")),
)


class Env(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    ua: str = Field(..., description="Browser code and major version, e.g. 'C/120'.")
    vp: tuple[int, int]
    dt: Literal["d", "t", "m"]


def device_class(width: int) -> Literal["d", "t", "m"]:
    if width < MOBILE_MAX_WIDTH:
        return "m"
    if width < TABLET_MAX_WIDTH:
        return "t"
    return "d"


def browser_code(user_agent: str | None) -> str:
    ua = user_agent or ""
    for code, pattern in _BROWSER_PATTERNS:
        match = pattern.search(ua)
        if match:
            return f"{code}/{match.group(1)}"
    return "O/"


def detect_env(user_agent: str | None, width: int, height: int) -> Env:
    return Env(ua=browser_code(user_agent), vp=(int(width), int(height)), dt=device_class(width))
