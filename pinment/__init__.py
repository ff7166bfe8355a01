"""Pinment: anchor comment pins to page elements and share them by URL."""

from __future__ import annotations

from .config import AppConfig, load_config
from .logging_utils import configure_logging

__version__ = "0.3.0"

__all__ = ["AppConfig", "__version__", "configure_logging", "load_config"]
