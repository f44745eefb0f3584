from __future__ import annotations

import argparse
import logging
import sys
import time

from .cleanup import LibraryCleaner
from .config import load_config, resolve_config_path
from .errors import ConfigurationError, FetchError
from .executor import FileActionExecutor
from .filesystem import LocalFileDeleter, LocalFileStats
from .logs import configure_logging
from .plex import PlexClient, build_base_url


LOGGER = logging.getLogger("plex_cleanup")

EXIT_FETCH_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plex-cleanup",
        description="Deletes files in specified Plex libraries based on configurable criteria.",
        epilog=(
            "Runs in test mode when STDIN is a tty and only shows what would be deleted. "
            "Under cron STDIN is not a tty and files are really deleted; use --live or "
            "</dev/null to do the same from a terminal."
        ),
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Config file. Resolution: CLI -> PLEX_CLEANUP_CONFIG env var -> ~/.config/plex-cleanup.yaml",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="-v lists every deleted file, -vv also lists kept files with their stats",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Only show what would be deleted")
    mode.add_argument("--live", action="store_true", help="Delete files even when STDIN is a tty")
    parser.add_argument("--host", default=None, help="Plex host. Resolution: CLI -> PLEX_HOST -> .env -> config")
    parser.add_argument("--port", type=int, default=None, help="Plex port. Resolution: CLI -> PLEX_PORT -> .env -> config")
    parser.add_argument("--token", default=None, help="Plex token. Resolution: CLI -> PLEX_TOKEN -> .env -> config")
    parser.add_argument(
        "--library",
        action="append",
        default=None,
        help="Only clean up this configured library (repeatable)",
    )
    return parser


def resolve_dry_run(args: argparse.Namespace) -> bool:
    if args.dry_run:
        return True
    if args.live:
        return False
    return sys.stdin is not None and sys.stdin.isatty()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    dry_run = resolve_dry_run(args)
    if dry_run:
        LOGGER.info("Running in TEST MODE, no changes will be made.  To run in live mode, use --live or </dev/null")

    config_path = resolve_config_path(args.config)
    try:
        config = load_config(
            config_path,
            overrides={"host": args.host, "port": args.port, "token": args.token},
        )
    except ConfigurationError as exc:
        LOGGER.error("ERROR: %s", exc)
        return EXIT_CONFIG_ERROR

    client = PlexClient(
        base_url=build_base_url(host=config.plex.host, port=config.plex.port, scheme=config.plex.scheme),
        token=config.plex.token,
        verify_ssl=config.plex.verify_ssl,
        timeout_seconds=config.plex.timeout_seconds,
    )
    LOGGER.debug("Using Plex Media Server at %s", client.base_url)
    cleaner = LibraryCleaner(
        source=client,
        stat_source=LocalFileStats(now=time.time()),
        executor=FileActionExecutor(deleter=LocalFileDeleter(), dry_run=dry_run),
    )

    try:
        cleaner.run_once(config.libraries, only=args.library)
    except FetchError as exc:
        LOGGER.error("ERROR: %s", exc)
        return EXIT_FETCH_ERROR
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
