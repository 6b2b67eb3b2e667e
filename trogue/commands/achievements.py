"""``achievements``: per-player achievement list for one game."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from trogue import formatting
from trogue.models import Achievement
from trogue.registry import Argument, Command, Context
from trogue.steam import SteamAPIError, SteamClient

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """``argparse`` type for Steam app ids."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid game id: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"invalid game id: {value!r}")
    return number


def with_global_percentages(
    client: SteamClient, app_id: int, achievements: list[Achievement]
) -> list[Achievement]:
    """Join global unlock percentages onto *achievements*.

    If the percentages cannot be fetched the achievements are returned
    unchanged.
    """
    try:
        percentages = client.get_global_achievement_percentages(app_id)
    except SteamAPIError as exc:
        logger.warning("Global percentages unavailable for app_id=%d: %s", app_id, exc)
        return achievements
    return formatting.join_global_percentages(achievements, percentages)


def run(context: Context, args: argparse.Namespace) -> str:
    achievements = context.client.get_achievements(args.game_id, context.config.steam_id)
    if not achievements:
        return "No achievements found for this game"
    if args.show_global:
        achievements = with_global_percentages(context.client, args.game_id, achievements)

    achieved: Optional[bool] = None
    if args.achieved:
        achieved = True
    elif args.remaining:
        achieved = False
    return "\n".join(formatting.achievement_lines(achievements, args.show_global, achieved))


COMMAND = Command(
    name="achievements",
    help="List achievements for a game",
    description="Displays achievements for a specific game. Game id should be provided as an argument.",
    handler=run,
    arguments=(
        Argument(
            ("game_id",),
            {"type": positive_int, "metavar": "GAME_ID", "help": "Steam app id of the game"},
        ),
        Argument(
            ("-g", "--global"),
            {
                "dest": "show_global",
                "action": "store_true",
                "help": "Append the global unlock percentage of each achievement",
            },
        ),
        Argument(
            ("-a", "--achieved"),
            {"action": "store_true", "help": "Only show unlocked achievements"},
            group="status",
        ),
        Argument(
            ("-r", "--remaining"),
            {"action": "store_true", "help": "Only show locked achievements"},
            group="status",
        ),
    ),
)
