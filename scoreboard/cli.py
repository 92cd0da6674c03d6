"""Command line access to scoreboards and the accessory cache."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from scoreboard.core.address import encode_sync_code, resolve
from scoreboard.core.bridge import ScoreboardBridge
from scoreboard.core.cache import JsonAccessoryCache
from scoreboard.core.config import SCOREBOARD_HTTP_TIMEOUT_S, SCOREBOARD_PORT, load_platform_config
from scoreboard.core.errors import ScoreboardError
from scoreboard.core.http_client import close_sync_session
from scoreboard.core.logging import configure_logging
from scoreboard.core.models import parse_input_source
from scoreboard.platform import ScoreboardPlatform

__all__ = ["build_parser", "main"]


def _bridge(args: argparse.Namespace) -> ScoreboardBridge:
    return ScoreboardBridge(resolve(args.token), port=args.port, timeout=args.timeout)


def _cmd_resolve(args: argparse.Namespace) -> int:
    status = 0
    for token in args.tokens:
        try:
            print(f"{token}\t{resolve(token)}")
        except ScoreboardError as exc:
            print(f"{token}\terror: {exc}", file=sys.stderr)
            status = 1
    return status


def _cmd_encode(args: argparse.Namespace) -> int:
    print(encode_sync_code(args.address))
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    state = _bridge(args).get_state().unwrap()
    source = state.input_source
    label = source.label if source is not None else "unknown"
    print(f"screen_on={state.screen_on} sport={state.sport} ({label})")
    return 0


def _cmd_power(args: argparse.Namespace) -> int:
    _bridge(args).set_power(args.state == "on").unwrap()
    return 0


def _cmd_sport(args: argparse.Namespace) -> int:
    try:
        source = parse_input_source(args.sport)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    _bridge(args).set_active_input(int(source)).unwrap()
    return 0


def _cmd_discover(args: argparse.Namespace) -> int:
    config = load_platform_config(args.config)
    cache = JsonAccessoryCache(args.cache)
    platform = ScoreboardPlatform(config, cache)
    for record in cache.persisted():
        platform.configure_accessory(record)
    report = platform.did_finish_launching()
    for record in report.restored:
        print(f"restored\t{record.display_name}\t{record.uuid}")
    for record in report.created:
        print(f"created\t{record.display_name}\t{record.uuid}")
    for failure in report.failures:
        print(f"failed\t{failure.token}\t{failure.error}", file=sys.stderr)
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scoreboard", description="Schmidt scoreboard bridge")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("resolve", help="Resolve sync codes to addresses")
    p.add_argument("tokens", nargs="+")
    p.set_defaults(func=_cmd_resolve)

    p = sub.add_parser("encode", help="Print the sync code for an address")
    p.add_argument("address")
    p.set_defaults(func=_cmd_encode)

    device_commands = (
        ("status", "Show power and sport", _cmd_status),
        ("power", "Switch the screen on or off", _cmd_power),
        ("sport", "Select the displayed sport", _cmd_sport),
    )
    for name, help_text, func in device_commands:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("token", help="Address or sync code")
        p.add_argument("--port", type=int, default=SCOREBOARD_PORT)
        p.add_argument("--timeout", type=float, default=SCOREBOARD_HTTP_TIMEOUT_S)
        if name == "power":
            p.add_argument("state", choices=("on", "off"))
        elif name == "sport":
            p.add_argument("sport", help="hockey, baseball, clock or a numeric code")
        p.set_defaults(func=func)

    p = sub.add_parser("discover", help="Run a discovery pass against a JSON accessory cache")
    p.add_argument("--config", type=Path, required=True, help="Platform block as JSON")
    p.add_argument("--cache", type=Path, required=True, help="Accessory cache file")
    p.set_defaults(func=_cmd_discover)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        default_level=logging.DEBUG if args.verbose else logging.WARNING,
        extra_loggers=("urllib3",),
    )
    try:
        return args.func(args)
    except ScoreboardError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        close_sync_session()
