"""Pure text rendering of games and achievements."""

from __future__ import annotations

import shutil
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional, Sequence

from trogue.models import Achievement, Game, GameAchievements

DEFAULT_GAME_PATTERN = "[i] n"
UNLOCKED_PATTERN = "n - s (t)"
LOCKED_PATTERN = "n"
DASHBOARD_TITLE = "Recently Played Games Dashboard"

BAR_FILL = "█"
BAR_EMPTY = " "
_ESCAPE = "\\"
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

GAME_TOKENS: dict[str, Callable[[Game], str]] = {
    "i": lambda g: str(g.app_id),
    "n": lambda g: g.name,
    "h": lambda g: f"{g.playtime_hours:.1f}",
}

ACHIEVEMENT_TOKENS: dict[str, Callable[[Achievement], str]] = {
    "i": lambda a: a.api_name,
    "n": lambda a: a.display_name,
    "d": lambda a: a.description or "",
    "s": lambda a: "Y" if a.achieved else "N",
    "t": lambda a: format_time(a.unlock_time),
}


# ------------------------------------------------------------------
# Patterns
# ------------------------------------------------------------------


def apply_pattern(pattern: str, tokens: Mapping[str, Callable], item: object) -> str:
    """Substitute single-character *tokens* in *pattern* with values of *item*.

    Any other character is copied as-is. A backslash makes the next
    character literal, so ``"\\n: n"`` renders ``"n: <name>"``.
    """
    out: list[str] = []
    escaped = False
    for ch in pattern:
        if escaped:
            out.append(ch)
            escaped = False
        elif ch == _ESCAPE:
            escaped = True
        elif ch in tokens:
            out.append(tokens[ch](item))
        else:
            out.append(ch)
    if escaped:
        out.append(_ESCAPE)
    return "".join(out)


def format_game(game: Game, pattern: str = DEFAULT_GAME_PATTERN) -> str:
    return apply_pattern(pattern, GAME_TOKENS, game)


def format_achievement(achievement: Achievement, pattern: str) -> str:
    return apply_pattern(pattern, ACHIEVEMENT_TOKENS, achievement)


def format_time(value: Optional[datetime]) -> str:
    return value.strftime(_TIME_FORMAT) if value else ""


# ------------------------------------------------------------------
# Games
# ------------------------------------------------------------------


def filter_games(games: Iterable[Game], name_filter: Optional[str]) -> list[Game]:
    """Return games whose name contains *name_filter*, ignoring case.

    Relative order is preserved; an empty or missing filter keeps everything.
    """
    if not name_filter:
        return list(games)
    needle = name_filter.casefold()
    return [g for g in games if needle in g.name.casefold()]


def game_lines(games: Iterable[Game], pattern: str = DEFAULT_GAME_PATTERN) -> list[str]:
    return [format_game(g, pattern) for g in games]


# ------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------


def join_global_percentages(
    achievements: Iterable[Achievement], percentages: Mapping[str, float]
) -> list[Achievement]:
    """Attach global unlock percentages by api name.

    Achievements with no matching percentage are kept with the field unset.
    """
    return [
        replace(a, global_percentage=percentages.get(a.api_name))
        for a in achievements
    ]


def achievement_line(achievement: Achievement, with_global: bool = False) -> str:
    pattern = UNLOCKED_PATTERN if achievement.achieved else LOCKED_PATTERN
    line = format_achievement(achievement, pattern)
    if with_global and achievement.global_percentage is not None:
        line += f" {achievement.global_percentage:.1f}%"
    return line


def achievement_lines(
    achievements: Iterable[Achievement],
    with_global: bool = False,
    achieved: Optional[bool] = None,
) -> list[str]:
    """Render one line per achievement in the given order.

    *achieved* restricts output to unlocked (``True``) or locked
    (``False``) achievements; ``None`` keeps all of them.
    """
    return [
        achievement_line(a, with_global)
        for a in achievements
        if achieved is None or a.achieved == achieved
    ]


# ------------------------------------------------------------------
# Progress
# ------------------------------------------------------------------


def default_bar_width() -> int:
    """Half the terminal width, as used by the progress and dashboard views."""
    return max(shutil.get_terminal_size((80, 24)).columns // 2, 1)


def completion_ratio(achieved: int, total: int) -> float:
    """Return achieved/total clamped to [0, 1]; 0.0 when *total* is 0."""
    if total <= 0:
        return 0.0
    return min(max(achieved / total, 0.0), 1.0)


def render_bar(achieved: int, total: int, width: int = 40) -> str:
    """Return a bracketed bar of *width* cells filled by achieved/total."""
    filled = round(completion_ratio(achieved, total) * width)
    return "[" + BAR_FILL * filled + BAR_EMPTY * (width - filled) + "]"


def progress_line(achieved: int, total: int, width: int = 40) -> str:
    percent = completion_ratio(achieved, total) * 100
    return f"{render_bar(achieved, total, width)} {percent:.1f}% ({achieved}/{total})"


def progress_lines(game: GameAchievements, width: int = 40) -> list[str]:
    if not game.achievements:
        return ["No achievements found for this game"]
    return [progress_line(game.unlocked, game.total, width)]


def dashboard_header(width: int) -> list[str]:
    rule = "=" * max(width, len(DASHBOARD_TITLE))
    return [rule, DASHBOARD_TITLE.center(len(rule)).rstrip(), rule]


def dashboard_lines(
    entries: Sequence[tuple[Game, Optional[GameAchievements]]], width: int = 40
) -> list[str]:
    """Render the dashboard for (game, achievements) pairs in order.

    ``None`` achievements mean the data could not be fetched for that game.
    """
    lines = dashboard_header(width)
    for game, achievements in entries:
        lines.append(game.name)
        if achievements is None:
            lines.append("Achievement data unavailable")
        else:
            lines.extend(progress_lines(achievements, width))
    return lines
