"""Tests for the feature commands in trogue.commands."""

import argparse
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from trogue.commands import achievements, dashboard, list_games, progress
from trogue.config import Config
from trogue.formatting import BAR_FILL
from trogue.models import Achievement, Game, GameAchievements
from trogue.registry import Context
from trogue.steam import NetworkError, SteamClient, UnauthorizedError

STEAM_ID = "76561198000000001"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def client():
    return MagicMock(spec=SteamClient)


@pytest.fixture()
def context(client):
    return Context(config=Config(api_key="key", steam_id=STEAM_ID), client=client)


@pytest.fixture(autouse=True)
def fixed_width(monkeypatch):
    monkeypatch.setattr("trogue.formatting.default_bar_width", lambda: 20)


def _achievements():
    return [
        Achievement(
            api_name="FIRST",
            display_name="First Blood",
            achieved=True,
            unlock_time=datetime(2023, 1, 1, tzinfo=timezone.utc),
        ),
        Achievement(api_name="SECOND", display_name="Second Wind"),
        Achievement(api_name="THIRD", display_name="Third Time"),
    ]


class TestListGames:
    def _args(self, name_filter=None, pattern="[i] n"):
        return argparse.Namespace(filter=name_filter, pattern=pattern)

    def test_filter_returns_single_match(self, context, client):
        client.get_owned_games.return_value = [
            Game(app_id=1, name="Portal"),
            Game(app_id=2, name="The Legend of Zelda"),
            Game(app_id=3, name="Dota 2"),
        ]
        output = list_games.run(context, self._args("zelda", "n"))
        lines = output.splitlines()
        assert lines == ["Displaying games filtered by: zelda", "The Legend of Zelda"]
        client.get_owned_games.assert_called_once_with(STEAM_ID)

    def test_all_games_default_pattern(self, context, client):
        client.get_owned_games.return_value = [Game(app_id=570, name="Dota 2")]
        output = list_games.run(context, self._args())
        assert output.splitlines() == ["Displaying all games:", "[570] Dota 2"]

    def test_no_match_reported(self, context, client):
        client.get_owned_games.return_value = [Game(app_id=1, name="Portal")]
        output = list_games.run(context, self._args("halo"))
        assert "No games matched." in output


class TestAchievements:
    def _args(self, game_id=570, show_global=False, achieved=False, remaining=False):
        return argparse.Namespace(
            game_id=game_id, show_global=show_global, achieved=achieved, remaining=remaining
        )

    def test_global_percentages_partial(self, context, client):
        client.get_achievements.return_value = _achievements()
        client.get_global_achievement_percentages.return_value = {
            "FIRST": 45.5,
            "THIRD": 3.25,
        }
        lines = achievements.run(context, self._args(show_global=True)).splitlines()
        assert len(lines) == 3
        assert lines[0] == "First Blood - Y (2023-01-01 00:00:00) 45.5%"
        assert lines[1] == "Second Wind"
        assert lines[2] == "Third Time 3.2%"
        client.get_achievements.assert_called_once_with(570, STEAM_ID)

    def test_global_not_requested_skips_call(self, context, client):
        client.get_achievements.return_value = _achievements()
        achievements.run(context, self._args())
        client.get_global_achievement_percentages.assert_not_called()

    def test_global_failure_degrades(self, context, client):
        client.get_achievements.return_value = _achievements()
        client.get_global_achievement_percentages.side_effect = NetworkError("down")
        lines = achievements.run(context, self._args(show_global=True)).splitlines()
        assert lines == [
            "First Blood - Y (2023-01-01 00:00:00)",
            "Second Wind",
            "Third Time",
        ]

    def test_remaining_only(self, context, client):
        client.get_achievements.return_value = _achievements()
        lines = achievements.run(context, self._args(remaining=True)).splitlines()
        assert lines == ["Second Wind", "Third Time"]

    def test_achieved_only(self, context, client):
        client.get_achievements.return_value = _achievements()
        lines = achievements.run(context, self._args(achieved=True)).splitlines()
        assert lines == ["First Blood - Y (2023-01-01 00:00:00)"]

    def test_no_achievements(self, context, client):
        client.get_achievements.return_value = []
        output = achievements.run(context, self._args())
        assert output == "No achievements found for this game"

    def test_base_failure_propagates(self, context, client):
        client.get_achievements.side_effect = UnauthorizedError("bad key")
        with pytest.raises(UnauthorizedError):
            achievements.run(context, self._args(show_global=True))

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_positive_int_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            achievements.positive_int(value)


class TestProgress:
    def test_renders_bar(self, context, client):
        client.get_game_achievements.return_value = GameAchievements(
            app_id=570, game_name="Dota 2", achievements=_achievements()
        )
        lines = progress.run(context, argparse.Namespace(game_id=570)).splitlines()
        assert lines[0] == "Dota 2"
        assert lines[1].count(BAR_FILL) == 7
        assert lines[1].endswith("33.3% (1/3)")

    def test_game_without_achievements(self, context, client):
        client.get_game_achievements.return_value = GameAchievements(app_id=10, game_name="")
        lines = progress.run(context, argparse.Namespace(game_id=10)).splitlines()
        assert lines == ["App 10", "No achievements found for this game"]


class TestDashboard:
    def _owned(self, count):
        return [
            Game(
                app_id=i,
                name=f"Game {i}",
                last_played=BASE_TIME + timedelta(days=(i * 7) % count),
            )
            for i in range(1, count + 1)
        ]

    def test_ten_most_recent_descending(self, context, client):
        owned = self._owned(15)
        recent = sorted(owned, key=lambda g: g.last_played, reverse=True)[:10]
        client.get_recently_played_games.return_value = recent
        client.get_game_achievements.side_effect = lambda app_id, steam_id: GameAchievements(
            app_id=app_id, game_name=f"Game {app_id}", achievements=_achievements()
        )
        output = dashboard.run(context, argparse.Namespace())
        client.get_recently_played_games.assert_called_once_with(STEAM_ID, 10)

        names = [line for line in output.splitlines() if line.startswith("Game ")]
        assert names == [g.name for g in recent]
        assert len(names) == 10
        assert [c.args[0] for c in client.get_game_achievements.call_args_list] == [
            g.app_id for g in recent
        ]

    def test_per_game_failure_is_omitted(self, context, client):
        games = [Game(app_id=1, name="Ok"), Game(app_id=2, name="Broken"), Game(app_id=3, name="Fine")]
        client.get_recently_played_games.return_value = games

        def fetch(app_id, steam_id):
            if app_id == 2:
                raise NetworkError("timeout")
            return GameAchievements(app_id=app_id, game_name="", achievements=_achievements())

        client.get_game_achievements.side_effect = fetch
        lines = dashboard.run(context, argparse.Namespace()).splitlines()
        assert lines[3:] == [
            "Ok",
            lines[4],
            "Broken",
            "Achievement data unavailable",
            "Fine",
            lines[8],
        ]
        assert lines[4].endswith("(1/3)")
        assert lines[8].endswith("(1/3)")

    def test_owned_games_failure_aborts(self, context, client):
        client.get_recently_played_games.side_effect = UnauthorizedError("bad key")
        with pytest.raises(UnauthorizedError):
            dashboard.run(context, argparse.Namespace())
