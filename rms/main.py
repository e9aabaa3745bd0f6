"""Entry point for the RMS Pro Textual app."""

from __future__ import annotations

import argparse
import logging

from rms.config import LOG_PATH
from rms.links import parse_deep_link
from rms.logger import log_event, setup_logging
from rms.rms_app import RmsApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rms", description="Restaurant front-of-house manager.")
    parser.add_argument(
        "--link",
        help="open a deep link, e.g. '?page=QRMenu&tableId=3' for a table's public menu",
    )
    parser.add_argument("--log-file", default=LOG_PATH, help="log file path (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="log debug messages")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, level=logging.DEBUG if args.debug else logging.INFO)

    start_page = parse_deep_link(args.link) if args.link else None
    log_event(f"app_start link={args.link!r} page={start_page!r}")
    RmsApp(start_page=start_page).run()


if __name__ == "__main__":
    main()
