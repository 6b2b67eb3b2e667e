"""``list``: owned games, optionally filtered by name."""

from __future__ import annotations

import argparse

from trogue import formatting
from trogue.registry import Argument, Command, Context


def run(context: Context, args: argparse.Namespace) -> str:
    games = context.client.get_owned_games(context.config.steam_id)

    if args.filter:
        lines = [f"Displaying games filtered by: {args.filter}"]
    else:
        lines = ["Displaying all games:"]

    matched = formatting.filter_games(games, args.filter)
    if not matched:
        lines.append("No games matched.")
    lines.extend(formatting.game_lines(matched, args.pattern))
    return "\n".join(lines)


COMMAND = Command(
    name="list",
    help="List all games owned by the configured account",
    handler=run,
    arguments=(
        Argument(
            ("-f", "--filter"),
            {
                "metavar": "TEXT",
                "default": None,
                "help": "Only show games whose name contains TEXT (case-insensitive)",
            },
        ),
        Argument(
            ("-p", "--pattern"),
            {
                "metavar": "PATTERN",
                "default": formatting.DEFAULT_GAME_PATTERN,
                "help": (
                    "Output format for each game (default: %(default)r). "
                    "Tokens: i - game id, n - game name, h - hours played. "
                    "Other characters are printed as-is; prefix a token "
                    "with a backslash to print it literally."
                ),
            },
        ),
    ),
)
