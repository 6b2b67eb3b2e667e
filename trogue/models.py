"""Data models for trogue."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Game:
    """A game owned by the configured Steam account."""

    app_id: int
    name: str
    playtime_minutes: int = 0
    icon_url: Optional[str] = None
    last_played: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.app_id <= 0:
            raise ValueError(f"Invalid app_id: {self.app_id}")
        if self.playtime_minutes < 0:
            raise ValueError("playtime_minutes cannot be negative")

    @property
    def playtime_hours(self) -> float:
        """Return playtime expressed in hours."""
        return round(self.playtime_minutes / 60, 2)


@dataclass(frozen=True)
class Achievement:
    """A single game achievement with the player's unlock status."""

    api_name: str
    display_name: str
    description: Optional[str] = None
    achieved: bool = False
    unlock_time: Optional[datetime] = None
    global_percentage: Optional[float] = None


@dataclass(frozen=True)
class GameAchievements:
    """Achievements reported for one game, in API order."""

    app_id: int
    game_name: str
    achievements: list[Achievement] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.achievements)

    @property
    def unlocked(self) -> int:
        return sum(1 for a in self.achievements if a.achieved)
