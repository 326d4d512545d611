from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .errors import CareerLogError
from .logging_utils import setup_logging
from .savefile import load_save_file
from .settings import CareerLogSettings, load_settings
from .timeline import month_label

log = logging.getLogger("CareerLog.CLI")


# ------------------------------- Helpers ------------------------------------ #


def _settings(args: argparse.Namespace) -> CareerLogSettings:
    base = load_settings(args.settings) if getattr(args, "settings", None) else CareerLogSettings()
    return base.with_overrides(
        server_url=getattr(args, "server", None),
        token=getattr(args, "token", None),
    )


# ------------------------------- Commands ----------------------------------- #


def _cmd_export_csv(args: argparse.Namespace) -> int:
    career_log = load_save_file(args.save, settings=_settings(args))
    career_log.export_to_file(args.out)
    print(f"wrote {len(career_log.periods)} periods to {args.out}")
    return 0


def _cmd_upload(args: argparse.Namespace) -> int:
    settings = _settings(args)
    if not settings.server_url or not settings.token:
        print("failed: server URL and token are required (--server/--token or settings file)", file=sys.stderr)
        return 2

    career_log = load_save_file(args.save, settings=settings)
    outcome = {}

    def _ok() -> None:
        outcome["ok"] = True

    def _fail(error: str) -> None:
        outcome["error"] = error

    career_log.export_to_web(settings.server_url, settings.token, _ok, _fail)
    if "error" in outcome:
        print(f"failed: {outcome['error']}", file=sys.stderr)
        return 1
    print("uploaded")
    return 0


def _cmd_periods(args: argparse.Namespace) -> int:
    career_log = load_save_file(args.save, settings=_settings(args))
    for period in career_log.periods:
        print(f"{month_label(period.start_ut)}\t{period.net_funds_change():.0f}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="careerlog",
        description="Career log - export period telemetry from a saved game",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase verbosity (use -vv for debug)",
    )
    parser.add_argument("--settings", help="Settings file (YAML or JSON)")

    sub = parser.add_subparsers(dest="subcommand", required=False)

    p_csv = sub.add_parser("export-csv", help="Write one CSV row per period")
    p_csv.add_argument("save", help="Save file holding the career log scenario")
    p_csv.add_argument("out", help="Destination CSV path")
    p_csv.set_defaults(func=_cmd_export_csv)

    p_up = sub.add_parser("upload", help="PATCH the career log to a remote server")
    p_up.add_argument("save", help="Save file holding the career log scenario")
    p_up.add_argument("--server", help="Server base URL")
    p_up.add_argument("--token", help="Career token appended to the URL")
    p_up.set_defaults(func=_cmd_upload)

    p_per = sub.add_parser("periods", help="List periods with their net funds change")
    p_per.add_argument("save", help="Save file holding the career log scenario")
    p_per.set_defaults(func=_cmd_periods)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (CareerLogError, OSError) as exc:
        log.debug("command failed", exc_info=True)
        print(f"failed: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
