"""Validation and migration of decoded annotation states."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from ..errors import StateValidationError
from ..logging_utils import get_logger
from ..num_utils import round_half_up
from .schema import (
    LEGACY_SCHEMA_VERSION,
    SCHEMA_VERSION,
    LegacyState,
    Pin,
    State,
)

log = get_logger("state.validator")


def migrate_v1_to_v2(legacy: LegacyState) -> State:
    """Turn legacy ratio pins into pixel-only v2 pins.

    Legacy pins carry no structural anchor, so the result has ``env`` set to
    null and every pin's ``s``/``ox``/``oy`` null.
    """

    pins = [
        Pin(
            id=pin.id,
            s=None,
            ox=None,
            oy=None,
            fx=round_half_up(pin.x * legacy.viewport),
            fy=pin.y,
            author=pin.author or "",
            text=pin.text,
        )
        for pin in legacy.pins
    ]
    return State(
        v=SCHEMA_VERSION,
        url=legacy.url,
        viewport=legacy.viewport,
        env=None,
        pins=pins,
    )


def _validate_v1(raw: dict[str, Any]) -> State:
    return migrate_v1_to_v2(LegacyState.model_validate(raw))


def _validate_v2(raw: dict[str, Any]) -> State:
    return State.model_validate(raw)


_VALIDATORS: dict[int, Callable[[dict[str, Any]], State]] = {
    LEGACY_SCHEMA_VERSION: _validate_v1,
    SCHEMA_VERSION: _validate_v2,
}


def require_state(raw: Any) -> State:
    """Validate ``raw`` (migrating v1) or raise :class:`StateValidationError`."""

    if not isinstance(raw, Mapping):
        raise StateValidationError(f"State must be an object, got {type(raw).__name__}")
    version = raw.get("v")
    if isinstance(version, bool) or not isinstance(version, int):
        raise StateValidationError(f"Unknown schema version {version!r}")
    validator = _VALIDATORS.get(version)
    if validator is None:
        raise StateValidationError(f"Unknown schema version {version!r}")
    try:
        return validator(dict(raw))
    except ValidationError as exc:
        raise StateValidationError(
            f"Invalid v{version} state: {exc.error_count()} error(s); {_first_error(exc)}"
        ) from exc
    except OverflowError as exc:
        raise StateValidationError(f"Invalid v{version} state: number out of range") from exc


def validate(raw: Any) -> State | None:
    """Return a validated v2 :class:`State`, or ``None``. Never raises."""

    try:
        return require_state(raw)
    except StateValidationError as exc:
        log.debug("Rejected state: {}", exc)
        return None


def create_state(
    url: str,
    viewport: int | float,
    pins: Iterable[Pin | Mapping[str, Any]] = (),
    env: BaseModel | Mapping[str, Any] | None = None,
) -> State:
    """Start a fresh v2 state for ``url`` (its fragment is dropped)."""

    data: dict[str, Any] = {
        "v": SCHEMA_VERSION,
        "url": url.split("#", 1)[0],
        "viewport": viewport,
        "pins": [pin if isinstance(pin, Pin) else Pin.model_validate(dict(pin)) for pin in pins],
    }
    if env is not None:
        data["env"] = env.model_dump(mode="json") if isinstance(env, BaseModel) else dict(env)
    return State(**data)


def next_pin_id(state: State) -> int:
    """Id for the next pin; ids are never reused within a session."""

    if not state.pins:
        return 1
    return max(pin.id for pin in state.pins) + 1


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "unknown error"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location or '<root>'}: {first.get('msg', '')}"
