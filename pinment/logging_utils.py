"""Loguru setup shared by the library and the CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FILE_NAME = "pinment.log"

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(log_dir: Path | str | None = None, level: str = "INFO") -> None:
    """Send logs to stderr and, when ``log_dir`` is given, a rotating file.

    stdout is left alone: the CLI prints JSON and share URLs there.
    """

    logger.remove()
    logger.configure(extra={"component": "pinment"})
    logger.add(sys.stderr, format=_LOG_FORMAT, colorize=True, level=level)

    if log_dir is None:
        return
    path = Path(log_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("File logging disabled, cannot create {}: {}", path, exc)
        return
    logger.add(
        path / LOG_FILE_NAME,
        rotation="1 day",
        retention="14 days",
        compression="gz",
        level=level,
        backtrace=False,
        diagnose=False,
        format=_LOG_FORMAT,
    )


def get_logger(name: Optional[str] = None):
    """Logger bound to a component name, e.g. ``get_logger("state.codec")``."""

    if name:
        return logger.bind(component=name)
    return logger
