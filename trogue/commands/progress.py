"""``progress``: achievement completion bar for one game."""

from __future__ import annotations

import argparse

from trogue import formatting
from trogue.commands.achievements import positive_int
from trogue.registry import Argument, Command, Context


def run(context: Context, args: argparse.Namespace) -> str:
    game = context.client.get_game_achievements(args.game_id, context.config.steam_id)
    lines = [game.game_name or f"App {game.app_id}"]
    lines.extend(formatting.progress_lines(game, formatting.default_bar_width()))
    return "\n".join(lines)


COMMAND = Command(
    name="progress",
    help="Show achievement progress for a game",
    handler=run,
    arguments=(
        Argument(
            ("game_id",),
            {"type": positive_int, "metavar": "GAME_ID", "help": "Steam app id of the game"},
        ),
    ),
)
