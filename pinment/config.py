"""Configuration loading and validation using Pydantic models."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_ENV_VAR = "PINMENT_CONFIG"

DEFAULT_BASE_URL = "https://khawkins98.github.io/pinment/"
DEFAULT_FRAGMENT_MARKER = "#data="
DEFAULT_MAX_URL_BYTES = 8000


class LocatorPolicy(BaseModel):
    """Heuristics deciding which ids and classes are worth anchoring on."""

    hash_id_min_length: int = Field(
        8,
        ge=1,
        description="Hex-only ids at least this long are treated as generated hashes.",
    )
    test_id_attributes: list[str] = Field(
        default_factory=lambda: ["data-testid", "data-test-id", "data-test", "data-cy"],
        description="Attributes checked, in order, for a test identifier segment.",
    )
    unstable_class_prefixes: list[str] = Field(
        default_factory=lambda: ["css-", "sc-", "emotion-", "styled-"],
    )
    hash_class_pattern: str = Field(
        r"^[a-z]{1,2}-[0-9a-z]{4,}$",
        description="Classes matching this pattern look like CSS-in-JS hashes.",
    )
    state_classes: list[str] = Field(
        default_factory=lambda: [
            "hover",
            "active",
            "focus",
            "open",
            "hidden",
            "show",
            "visible",
            "is-open",
            "is-active",
            "is-hidden",
        ],
        description="Interaction-state classes that toggle at runtime.",
    )

    @field_validator("hash_class_pattern")
    @classmethod
    def _compile_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"hash_class_pattern is not a valid regex: {exc}") from exc
        return value


class AnchorConfig(BaseModel):
    ratio_precision: int = Field(
        3,
        ge=0,
        le=6,
        description="Decimal places kept for offset ratios.",
    )


class ShareConfig(BaseModel):
    base_url: str = Field(DEFAULT_BASE_URL, description="Hub page the share URL points at.")
    fragment_marker: str = Field(DEFAULT_FRAGMENT_MARKER)
    max_url_bytes: int = Field(
        DEFAULT_MAX_URL_BYTES,
        ge=256,
        description="Budget for the assembled share URL, in UTF-8 bytes.",
    )
    warn_percent: int = Field(60, ge=0, le=100)
    danger_percent: int = Field(80, ge=0, le=100)
    compression_level: int = Field(9, ge=0, le=9)
    max_decoded_bytes: int = Field(
        1024 * 1024,
        ge=1024,
        description="Upper bound on the decompressed payload size.",
    )

    @field_validator("fragment_marker")
    @classmethod
    def _marker_is_fragment(cls, value: str) -> str:
        if not value.startswith("#") or len(value) < 2:
            raise ValueError("fragment_marker must start with '#'")
        return value


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    log_dir: Optional[Path] = None


class AppConfig(BaseModel):
    locator: LocatorPolicy = LocatorPolicy()
    anchor: AnchorConfig = AnchorConfig()
    share: ShareConfig = ShareConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(path: Path | str | None = None) -> AppConfig:
    """Load YAML configuration from disk.

    ``None`` falls back to ``PINMENT_CONFIG``; with neither set the defaults
    are returned.
    """

    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return AppConfig()
    config_path = Path(path)
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return AppConfig.model_validate(data or {})
