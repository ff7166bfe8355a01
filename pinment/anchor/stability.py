"""Heuristics for ids and classes that survive page reloads."""

from __future__ import annotations

import re
from functools import lru_cache

from ..config import LocatorPolicy

_DEFAULT_POLICY = LocatorPolicy()

_RE_DIGITS = re.compile(r"^\d+$")
_FRAMEWORK_ID_CHARS = (":", ".")


def is_stable_identifier(value: str | None, policy: LocatorPolicy | None = None) -> bool:
    """Reject ids that look generated: long hex hashes, numbers, ``:``/``.``."""

    if not value:
        return False
    policy = policy or _DEFAULT_POLICY
    if _hex_pattern(policy.hash_id_min_length).match(value):
        return False
    if _RE_DIGITS.match(value):
        return False
    if any(ch in value for ch in _FRAMEWORK_ID_CHARS):
        return False
    return True


def is_stable_class(value: str | None, policy: LocatorPolicy | None = None) -> bool:
    """Reject CSS-in-JS hashes and interaction-state classes."""

    if not value:
        return False
    policy = policy or _DEFAULT_POLICY
    if any(value.startswith(prefix) for prefix in policy.unstable_class_prefixes):
        return False
    if _compiled(policy.hash_class_pattern).match(value):
        return False
    if value in policy.state_classes:
        return False
    return True


def stable_classes(classes, policy: LocatorPolicy | None = None) -> list[str]:
    if not classes:
        return []
    if isinstance(classes, str):
        classes = classes.split()
    return [cls for cls in classes if is_stable_class(cls, policy)]


@lru_cache(maxsize=16)
def _hex_pattern(min_length: int) -> re.Pattern[str]:
    return re.compile(rf"^[0-9a-f]{{{min_length},}}$", re.IGNORECASE)


@lru_cache(maxsize=16)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
