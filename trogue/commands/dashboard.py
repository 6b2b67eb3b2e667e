"""``dashboard``: progress of the most recently played games."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from trogue import formatting
from trogue.models import Game, GameAchievements
from trogue.registry import Command, Context
from trogue.steam import SteamAPIError

logger = logging.getLogger(__name__)

RECENT_GAMES = 10


def run(context: Context, args: argparse.Namespace) -> str:
    steam_id = context.config.steam_id
    games = context.client.get_recently_played_games(steam_id, RECENT_GAMES)

    entries: list[tuple[Game, Optional[GameAchievements]]] = []
    for game in games:
        try:
            achievements: Optional[GameAchievements] = (
                context.client.get_game_achievements(game.app_id, steam_id)
            )
        except SteamAPIError as exc:
            logger.warning("Skipping achievements for app_id=%d: %s", game.app_id, exc)
            achievements = None
        entries.append((game, achievements))

    return "\n".join(formatting.dashboard_lines(entries, formatting.default_bar_width()))


COMMAND = Command(
    name="dashboard",
    help=f"Show achievement progress for the {RECENT_GAMES} most recently played games",
    handler=run,
)
