"""
Matchup analyzers.

A 1v1 matchup is written with race letters, e.g. "TvZ". The neutral form sorts
the letters ("PvZ", never "ZvP"); the -me form puts the -me player's race first.
"""

from __future__ import annotations

from raszagal.analyzers import validators
from raszagal.analyzers.base import AnalyzerContext, MetadataAnalyzer, bool_result, require_me
from raszagal.replay import Replay


def _letters(replay: Replay) -> list[str]:
    return [p.race.letter.upper() for p in replay.players]


def _is_two_player(replay: Replay) -> bool:
    return len(replay.players) == 2


def my_perspective_matchup(replay: Replay, player_id: int) -> str:
    """Matchup with the -me player's team first, other teams in listing order."""
    me = replay.players_by_id[player_id]
    if _is_two_player(replay):
        other = next(p for p in replay.players if p.id != player_id)
        return f"{me.race.letter.upper()}v{other.race.letter.upper()}"
    teams: dict[int, list[str]] = {me.team: []}
    for player in replay.players:
        teams.setdefault(player.team, []).append(player.race.letter.upper())
    return "v".join("".join(letters) for letters in teams.values())


class Matchup(MetadataAnalyzer):
    name = "matchup"
    description = (
        "Analyzes the replay's matchup. On an 1v1, it will sort the races lexicographically, "
        "so it will return TvZ rather than ZvT. Other than 1v1, races are grouped by team."
    )

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if _is_two_player(replay):
            return "v".join(sorted(_letters(replay)))
        return replay.matchup()


class MyMatchup(MetadataAnalyzer):
    name = "my-matchup"
    description = (
        "Analyzes the replay's matchup from the point of view of the -me player. For example, "
        "if the -me player is Z and the opponent is T it will return ZvT rather than TvZ."
    )

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return my_perspective_matchup(replay, require_me(replay, ctx))


class MatchupIs(MetadataAnalyzer):
    """Always false for anything but a two player game."""

    name = "matchup-is"
    description = (
        "Analyzes if the replay's matchup is equal to the specified one (only works for 1v1 "
        "for now). The specified matchup can be in either order (i.e. ZvT == TvZ)."
    )
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.matchup)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if not _is_two_player(replay):
            return "false"
        return bool_result(sorted(_letters(replay)) == self.args)


class MyMatchupIs(MetadataAnalyzer):
    name = "my-matchup-is"
    description = (
        "Analyzes if the replay's matchup is equal to the specified one, from the -me player "
        "perspective (only works for 1v1 for now). The specified matchup must contain the -me "
        "player's race first."
    )
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.ordered_matchup)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if not _is_two_player(replay):
            return "false"
        player_id = require_me(replay, ctx)
        me = replay.players_by_id[player_id]
        other = next(p for p in replay.players if p.id != player_id)
        actual = [me.race.letter.upper(), other.race.letter.upper()]
        return bool_result(actual == self.args)
