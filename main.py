"""
Main entry point for the dependency watcher.
Provides the ``await`` and ``monitor`` commands.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import httpx
from pydantic import ValidationError

from repository.client import RepositoryFactory, build_http_client
from utilities.config import WatchSettings, config
from utilities.exceptions import ConfigError, FetchFailed, InvalidCoordinate
from utilities.logger import setup_logging, get_logger
from watcher.models import load_watch_config
from watcher.notifier import build_notifier
from watcher.orchestrator import WatchOrchestrator

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="dependency-watch",
        description="Watch a Maven repository for new artifact versions",
    )
    parser.add_argument(
        "--ifttt",
        metavar="URL",
        help="IFTTT webhook URL to trigger (see https://ifttt.com/maker_webhooks)",
    )
    parser.add_argument(
        "--interval",
        metavar="SECONDS",
        type=_positive_float,
        help="Seconds between polls (default: POLL_INTERVAL_SECONDS or 60)",
    )
    parser.add_argument(
        "--repository",
        metavar="URL",
        help="Repository base URL (default: REPOSITORY_URL or Maven Central)",
    )
    parser.add_argument("--debug", action="store_true", help=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    await_parser = subparsers.add_parser(
        "await",
        help="Wait for an artifact to appear on the repository then exit",
    )
    await_parser.add_argument(
        "coordinates",
        help="Maven coordinates (e.g., 'com.example:example:1.0.0')",
    )

    monitor_parser = subparsers.add_parser(
        "monitor",
        help="Constantly monitor Maven coordinates for new versions",
    )
    monitor_parser.add_argument("config", type=Path, help="YAML file listing coordinates")

    return parser


def apply_overrides(settings: WatchSettings, args: argparse.Namespace) -> WatchSettings:
    """Apply command-line options on top of environment settings."""
    overrides = {}
    if args.ifttt:
        overrides["webhook_url"] = args.ifttt
    if args.interval is not None:
        overrides["poll_interval_seconds"] = args.interval
    if args.repository:
        overrides["repository_url"] = args.repository
    if args.debug:
        overrides["debug"] = True
        overrides["log_level"] = "DEBUG"
    if not overrides:
        return settings
    return WatchSettings.model_validate({**settings.model_dump(), **overrides})


async def run_command(
    args: argparse.Namespace,
    settings: WatchSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """
    Run the selected command with a shared HTTP client.

    Args:
        args: Parsed command-line arguments
        settings: Effective settings
        transport: Optional httpx transport, used by tests

    Returns:
        Process exit code
    """
    logger = get_logger(__name__)
    client_kwargs = {"transport": transport} if transport is not None else {}

    async with build_http_client(settings, **client_kwargs) as client:
        repository = RepositoryFactory(client).maven2(
            settings.repository_name, settings.repository_url
        )
        notifier = build_notifier(client, settings.webhook_url)
        orchestrator = WatchOrchestrator(
            repository,
            notifier,
            poll_interval=settings.poll_interval_seconds,
        )

        try:
            if args.command == "await":
                result = await orchestrator.await_version(args.coordinates)
                logger.info(
                    "Await completed",
                    coordinate=str(result.coordinate),
                    version=result.version,
                    attempts=result.attempts,
                    notified=result.notified
                )
            else:
                config_path = args.config

                def load_coordinates():
                    return load_watch_config(config_path).parse_coordinates()

                await orchestrator.watch(load_coordinates)
        except (InvalidCoordinate, ConfigError) as e:
            logger.error("Invalid configuration", error=str(e))
            return EXIT_CONFIG_ERROR
        except FetchFailed as e:
            logger.error("Fetch failed", error=str(e), status_code=e.status_code)
            return EXIT_FETCH_FAILED

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, set up logging and run the command."""
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(config, args)
    except ValidationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.get_log_file_path(),
        debug=settings.debug
    )

    try:
        return asyncio.run(run_command(args, settings))
    except KeyboardInterrupt:
        get_logger(__name__).info("Received keyboard interrupt, shutting down...")
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
