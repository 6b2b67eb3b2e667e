"""Command-line interface for trogue."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional

from trogue import config
from trogue.commands import achievements, completions, dashboard, list_games, progress
from trogue.registry import CommandRegistry, Context, UsageError
from trogue.steam import (
    DeserializeError,
    NetworkError,
    SteamAPIError,
    SteamClient,
    UnauthorizedError,
)

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

FEATURE_COMMANDS = (
    list_games.COMMAND,
    achievements.COMMAND,
    progress.COMMAND,
    dashboard.COMMAND,
)


def build_registry() -> CommandRegistry:
    registry = CommandRegistry(FEATURE_COMMANDS)
    registry.register(completions.make_command(registry))
    return registry


def build_parser(registry: CommandRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=completions.PROG,
        description="A CLI tool for displaying Steam games and achievements.",
        epilog=(
            f"Requires the {config.API_KEY_VAR} and {config.STEAM_ID_VAR} "
            "environment variables."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log API requests and recoverable failures to stderr",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    registry.add_to_parser(parser)
    return parser


def make_context() -> Context:
    cfg = config.load()
    return Context(config=cfg, client=SteamClient(cfg.api_key))


def _error_message(exc: Exception) -> str:
    if isinstance(exc, UnauthorizedError):
        return (
            f"{exc}. Check {config.API_KEY_VAR} and {config.STEAM_ID_VAR} "
            "and that the profile's game details are public."
        )
    if isinstance(exc, NetworkError):
        return f"{exc}. Check your connection and try again."
    if isinstance(exc, DeserializeError):
        return f"Unexpected response format from the Steam API: {exc}"
    return str(exc)


def main(
    argv: list[str] | None = None,
    context_factory: Optional[Callable[[], Context]] = None,
) -> int:
    registry = build_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        output = registry.dispatch(args, context_factory or make_context)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except (config.ConfigError, SteamAPIError) as exc:
        logger.debug("Command %r failed", args.command, exc_info=True)
        print(f"Error: {_error_message(exc)}", file=sys.stderr)
        return 1

    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
