"""Pydantic schemas for the versioned annotation state.

Two wire versions exist. Version 2 is current; version 1 is only read so
it can be migrated. Models run in strict mode: a JSON ``true`` is not a
number and ``"3"`` is not an id.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

SCHEMA_VERSION = 2
LEGACY_SCHEMA_VERSION = 1

Category = Literal["text", "layout", "missing", "question"]
CATEGORIES: tuple[str, ...] = get_args(Category)

# Pixel values must survive conversion to a float.
MAX_SAFE_INTEGER = 2**53 - 1

SafeInt = Annotated[int, Field(ge=-MAX_SAFE_INTEGER, le=MAX_SAFE_INTEGER)]
FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]
Number = Union[SafeInt, FiniteFloat]
Ratio = Annotated[float, Field(ge=0.0, le=1.0)]


class _WireModel(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    # Keys that may be left out but must not be sent as null.
    _omit_only: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _reject_null_optionals(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for key in cls._omit_only:
                if key in data and data[key] is None:
                    raise ValueError(f"'{key}' may be omitted but not null")
        return data

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict; fields that were never set stay out."""

        return self.model_dump(mode="json", exclude_unset=True)


class Reply(_WireModel):
    _omit_only: ClassVar[tuple[str, ...]] = ("author",)

    author: Optional[str] = None
    text: str


class Pin(_WireModel):
    _omit_only: ClassVar[tuple[str, ...]] = ("author", "c", "resolved", "replies")

    id: int
    s: Optional[str] = None
    ox: Optional[Ratio] = None
    oy: Optional[Ratio] = None
    fx: Number
    fy: Number
    author: Optional[str] = None
    text: str
    c: Optional[Category] = None
    resolved: Optional[bool] = None
    replies: Optional[list[Reply]] = None

    @property
    def has_anchor(self) -> bool:
        return self.s is not None


class State(_WireModel):
    v: Literal[2]
    url: str
    viewport: Number
    env: Optional[dict[str, Any]] = None
    pins: list[Pin]

    @model_validator(mode="after")
    def _unique_pin_ids(self) -> "State":
        seen: set[int] = set()
        for pin in self.pins:
            if pin.id in seen:
                raise ValueError(f"duplicate pin id {pin.id}")
            seen.add(pin.id)
        return self


class LegacyPin(_WireModel):
    """Version 1 pin: horizontal ratio of the viewport plus absolute y."""

    _omit_only: ClassVar[tuple[str, ...]] = ("author",)

    id: int
    x: Ratio
    y: Number
    text: str
    author: Optional[str] = None


class LegacyState(_WireModel):
    v: Literal[1]
    url: str
    viewport: Number
    pins: list[LegacyPin]
