"""Exception types raised by the strict pinment surfaces."""

from __future__ import annotations


class PinmentError(RuntimeError):
    """Base class for pinment errors."""


class InvalidLocatorError(PinmentError):
    """A locator string could not be compiled into a document query."""

    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Invalid locator {locator!r}: {reason}")
        self.locator = locator
        self.reason = reason


class StateValidationError(PinmentError):
    """An annotation state failed schema validation."""


class CapacityExceededError(PinmentError):
    """The assembled share URL is larger than the configured budget."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(
            f"Share URL is {size_bytes} bytes, over the {limit_bytes} byte limit"
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
