"""Command-line entrypoint for pinment.

Offline companion to the in-page tool: anchor clicks against a saved page
and geometry file, re-place pins, build and open share URLs.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from loguru import logger

from .anchor.calculator import compute_anchor
from .anchor.resolver import place_markers
from .config import CONFIG_ENV_VAR, AppConfig, load_config
from .document.layout import StaticLayout
from .document.tree import Document
from .errors import PinmentError
from .logging_utils import configure_logging
from .state.capacity import assess_with_config
from .state.codec import ShareCodec, read_json, to_json, write_json
from .state.schema import State


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="pinment")
    p.add_argument(
        "--config",
        default=os.environ.get(CONFIG_ENV_VAR),
        help=f"Path to config YAML (default: {CONFIG_ENV_VAR} or built-in defaults).",
    )
    p.add_argument("--log-level", default=None, help="Override the configured log level.")
    sub = p.add_subparsers(dest="cmd", required=True)

    anchor = sub.add_parser("anchor", help="Compute the anchor for a click on a saved page.")
    anchor.add_argument("html", type=Path)
    anchor.add_argument("geometry", type=Path, help="YAML file with node boxes.")
    anchor.add_argument("x", type=float, help="Click x in viewport pixels.")
    anchor.add_argument("y", type=float, help="Click y in viewport pixels.")

    resolve = sub.add_parser("resolve", help="Place every pin of a state on a saved page.")
    resolve.add_argument("html", type=Path)
    resolve.add_argument("geometry", type=Path)
    resolve.add_argument("state", type=Path, help="Exported state JSON.")

    share = sub.add_parser("share", help="Print the share URL for an exported state.")
    share.add_argument("state", type=Path)
    share.add_argument("--base-url", default=None)
    share.add_argument(
        "--force",
        action="store_true",
        help="Print the URL even when it is over the size budget.",
    )

    open_ = sub.add_parser("open", help="Decode a share URL into state JSON.")
    open_.add_argument("url")
    open_.add_argument("--output", type=Path, default=None, help="Write JSON here.")

    capacity = sub.add_parser("capacity", help="Report share URL size against the budget.")
    capacity.add_argument("state", type=Path)
    capacity.add_argument("--base-url", default=None)

    sub.add_parser("print-config", help="Load config and print resolved values.")

    return p.parse_args(argv)


def _load_state(path: Path) -> State:
    state = read_json(path)
    if state is None:
        raise PinmentError(f"{path} is not a valid annotation state")
    return state


def _cmd_anchor(config: AppConfig, args: argparse.Namespace) -> int:
    document = Document.from_path(args.html)
    layout = StaticLayout.load(document, args.geometry)
    anchor = compute_anchor(document, layout, args.x, args.y, config=config)
    if anchor.s is None:
        logger.warning("No element anchor at ({}, {}); pixel position only", args.x, args.y)
    print(json.dumps(anchor.as_pin_fields(), ensure_ascii=False))
    return 0


def _cmd_resolve(config: AppConfig, args: argparse.Namespace) -> int:
    document = Document.from_path(args.html)
    layout = StaticLayout.load(document, args.geometry)
    state = _load_state(args.state)
    markers = place_markers(document, layout, state)
    broken = [m.pin_id for m in markers if m.is_fallback]
    if broken:
        logger.warning("Anchors broke for pins {}; using stored pixels", broken)
    payload = [
        {"id": m.pin_id, "left": m.left, "top": m.top, "fallback": m.is_fallback}
        for m in markers
    ]
    print(json.dumps(payload, indent=2))
    return 0


def _cmd_share(config: AppConfig, args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    codec = ShareCodec(config.share)
    report = assess_with_config(state, config.share, args.base_url)
    if report.over_limit and not args.force:
        logger.error(
            "{}. Remove some annotations or shorten comments before sharing.",
            report.describe(),
        )
        return 2
    if report.level != "ok":
        logger.warning("{}", report.describe())
    print(codec.to_share_url(state, args.base_url))
    return 0


def _cmd_open(config: AppConfig, args: argparse.Namespace) -> int:
    state = ShareCodec(config.share).open_share_url(args.url)
    if state is None:
        logger.error("Could not read annotations from the share URL")
        return 2
    if args.output:
        write_json(args.output, state)
        logger.info("Wrote {} pin(s) to {}", len(state.pins), args.output)
    else:
        print(to_json(state))
    return 0


def _cmd_capacity(config: AppConfig, args: argparse.Namespace) -> int:
    state = _load_state(args.state)
    report = assess_with_config(state, config.share, args.base_url)
    print(
        json.dumps(
            {
                "bytes": report.size_bytes,
                "limit": report.limit_bytes,
                "percent": report.percent,
                "level": report.level,
                "over_limit": report.over_limit,
            }
        )
    )
    return 1 if report.over_limit else 0


_COMMANDS = {
    "anchor": _cmd_anchor,
    "resolve": _cmd_resolve,
    "share": _cmd_share,
    "open": _cmd_open,
    "capacity": _cmd_capacity,
}


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = _parse_args(argv)

    config = load_config(args.config)
    configure_logging(config.logging.log_dir, args.log_level or config.logging.level)

    if args.cmd == "print-config":
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        raise SystemExit(0)

    try:
        raise SystemExit(_COMMANDS[args.cmd](config, args))
    except (PinmentError, OSError, ValueError) as exc:
        logger.error("{}", exc)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
