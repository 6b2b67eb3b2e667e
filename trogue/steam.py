"""Steam Web API client."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import requests

from trogue.models import Achievement, Game, GameAchievements

logger = logging.getLogger(__name__)

_BASE = "https://api.steampowered.com"
_TIMEOUT = 10  # seconds
_ICON_URL = "https://media.steampowered.com/steamcommunity/public/images/apps/{app_id}/{icon}.jpg"


class SteamAPIError(Exception):
    """Base class for failures talking to the Steam API."""


class NetworkError(SteamAPIError):
    """The API could not be reached or answered with a server error."""


class UnauthorizedError(SteamAPIError):
    """The API rejected the key or the Steam ID."""


class DeserializeError(SteamAPIError):
    """The API answered with a body of an unexpected shape."""


class SteamClient:
    """Thin wrapper around the Steam Web API.

    Parameters
    ----------
    api_key:
        Your Steam Web API key (https://steamcommunity.com/dev/apikey).
    base_url:
        API root, overridable for tests.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self, api_key: str, base_url: str = _BASE, timeout: float = _TIMEOUT
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._key = api_key
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.params = {"key": self._key, "format": "json"}  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, tolerate: Iterable[int] = (), **params: Any) -> Any:
        """GET *path* and return the decoded JSON body.

        Statuses listed in *tolerate* are returned like successes so the
        caller can inspect the body.
        """
        url = f"{self._base}/{path}"
        logger.debug("GET %s %s", path, params)
        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Steam API unreachable: {exc}") from exc

        status = resp.status_code
        if status in (401, 403):
            raise UnauthorizedError(
                _error_text(resp)
                or f"Steam API rejected the request (HTTP {status})"
            )
        if status not in tolerate:
            try:
                resp.raise_for_status()
            except requests.HTTPError as exc:
                raise NetworkError(f"Steam API returned HTTP {status}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise DeserializeError(f"Response from {path} is not JSON") from exc
        if not isinstance(data, dict):
            raise DeserializeError(f"Response from {path} is not a JSON object")
        return data

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    def get_owned_games(self, steam_id: str) -> list[Game]:
        """Return the games owned by *steam_id*, in API order."""
        data = self._get(
            "IPlayerService/GetOwnedGames/v1/",
            steamid=steam_id,
            include_appinfo=1,
            include_played_free_games=1,
        )
        response = _section(data, "response")
        raw_games = response.get("games", [])
        if not isinstance(raw_games, list):
            raise DeserializeError("'games' is not a list")

        games: list[Game] = []
        for raw in raw_games:
            if not isinstance(raw, dict):
                raise DeserializeError(f"Unexpected game entry: {raw!r}")
            if not raw.get("appid"):
                logger.debug("Skipping game entry without appid: %r", raw)
                continue
            games.append(_parse_game(raw))
        return games

    def get_game_achievements(self, app_id: int, steam_id: str) -> GameAchievements:
        """Return the achievements of *app_id* for *steam_id*.

        A game without stats yields an empty list rather than an error.
        """
        data = self._get(
            "ISteamUserStats/GetPlayerAchievements/v1/",
            tolerate=(400,),
            steamid=steam_id,
            appid=app_id,
            l="english",
        )
        playerstats = _section(data, "playerstats")
        if not playerstats.get("success", False):
            logger.info(
                "No achievements for app_id=%d: %s",
                app_id,
                playerstats.get("error", "unknown reason"),
            )
            return GameAchievements(
                app_id=app_id, game_name=str(playerstats.get("gameName", ""))
            )

        raw_achievements = playerstats.get("achievements", [])
        if not isinstance(raw_achievements, list):
            raise DeserializeError("'achievements' is not a list")
        return GameAchievements(
            app_id=app_id,
            game_name=str(playerstats.get("gameName", "")),
            achievements=[_parse_achievement(raw) for raw in raw_achievements],
        )

    def get_achievements(self, app_id: int, steam_id: str) -> list[Achievement]:
        """Return *steam_id*'s achievements for *app_id* without global data."""
        return self.get_game_achievements(app_id, steam_id).achievements

    def get_global_achievement_percentages(self, app_id: int) -> dict[str, float]:
        """Return a mapping of achievement api name to global unlock percent."""
        data = self._get(
            "ISteamUserStats/GetGlobalAchievementPercentagesForApp/v2/",
            gameid=app_id,
        )
        section = _section(data, "achievementpercentages")
        raw_list = section.get("achievements", [])
        if not isinstance(raw_list, list):
            raise DeserializeError("'achievements' is not a list")
        try:
            return {str(raw["name"]): float(raw["percent"]) for raw in raw_list}
        except (KeyError, TypeError, ValueError) as exc:
            raise DeserializeError(f"Unexpected global achievement entry: {exc}") from exc

    def get_recently_played_games(self, steam_id: str, limit: int = 10) -> list[Game]:
        """Return up to *limit* owned games, most recently played first.

        Games that were never played sort last.
        """
        games = self.get_owned_games(steam_id)
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        games.sort(key=lambda g: g.last_played or epoch, reverse=True)
        return games[:limit]

    # ------------------------------------------------------------------
    # Convenience parsers
    # ------------------------------------------------------------------

    @staticmethod
    def parse_last_played(unix_ts: Optional[int]) -> Optional[datetime]:
        """Convert a Unix timestamp to a UTC-aware *datetime*, or ``None``."""
        if not unix_ts:
            return None
        return datetime.fromtimestamp(unix_ts, tz=timezone.utc)


def _error_text(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        playerstats = data.get("playerstats")
        if isinstance(playerstats, dict) and playerstats.get("error"):
            return str(playerstats["error"])
    return ""


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key)
    if not isinstance(section, dict):
        raise DeserializeError(f"Response is missing the {key!r} object")
    return section


def _parse_game(raw: dict[str, Any]) -> Game:
    try:
        app_id = int(raw["appid"])
        icon = raw.get("img_icon_url") or None
        return Game(
            app_id=app_id,
            name=str(raw.get("name", f"App {app_id}")),
            playtime_minutes=int(raw.get("playtime_forever", 0)),
            icon_url=_ICON_URL.format(app_id=app_id, icon=icon) if icon else None,
            last_played=SteamClient.parse_last_played(raw.get("rtime_last_played")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise DeserializeError(f"Unexpected game entry {raw!r}: {exc}") from exc


def _parse_achievement(raw: Any) -> Achievement:
    try:
        achieved = bool(raw.get("achieved", 0))
        return Achievement(
            api_name=str(raw["apiname"]),
            display_name=str(raw.get("name") or raw["apiname"]),
            description=raw.get("description") or None,
            achieved=achieved,
            unlock_time=(
                SteamClient.parse_last_played(raw.get("unlocktime")) if achieved else None
            ),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DeserializeError(f"Unexpected achievement entry {raw!r}: {exc}") from exc
