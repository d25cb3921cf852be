"""
Basic replay analyzers: players, races, map, dates, paths and game outcome.

All of them resolve in the metadata phase.
"""

from __future__ import annotations

from pathlib import Path

from raszagal.analyzers import validators
from raszagal.analyzers.base import (
    AnalyzerContext,
    MetadataAnalyzer,
    bool_result,
    require_me,
)
from raszagal.core.constants import NO_PLAYER
from raszagal.errors import AnalyzerError
from raszagal.replay import Replay, find_player_id


class IsThereARace(MetadataAnalyzer):
    name = "is-there-a-race"
    description = "Analyzes if there is a specific race in the replay."
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.race)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return bool_result(any(p.race.name == self.args[0] for p in replay.players))


class MyAPM(MetadataAnalyzer):
    """
    APM of the -me player from derived stats; -1 when stats are unavailable.

    Stats that exist but lack the -me player are an error.
    """

    name = "my-apm"
    description = "Analyzes the APM of the -me player."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if replay.computed is None:
            return "-1"
        player_id = require_me(replay, ctx)
        desc = replay.computed.desc_for(player_id)
        if desc is None:
            raise AnalyzerError(f"no derived stats for -me player with id {player_id}")
        return str(desc.apm)


class MyRace(MetadataAnalyzer):
    name = "my-race"
    description = "Analyzes the race of the -me player."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return replay.players_by_id[require_me(replay, ctx)].race.name


class MyRaceIs(MetadataAnalyzer):
    name = "my-race-is"
    description = "Analyzes if the race of the -me player is the one specified."
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.race)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        race = replay.players_by_id[require_me(replay, ctx)].race.name
        return bool_result(race == self.args[0])


class Date(MetadataAnalyzer):
    name = "date"
    description = (
        "Analyzes the date of the replay. Uses yyyy-mm-dd pattern because it's "
        "lexicographically sorted."
    )

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if replay.start_time is None:
            return ""
        return replay.start_time.strftime("%Y-%m-%d")


class DateTime(MetadataAnalyzer):
    name = "date-time"
    description = "Analyzes the datetime of the replay."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if replay.start_time is None:
            return ""
        return replay.start_time.isoformat(sep=" ")


class MyName(MetadataAnalyzer):
    name = "my-name"
    description = "Analyzes the name of the -me player."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return replay.players_by_id[require_me(replay, ctx)].name


class ReplayName(MetadataAnalyzer):
    name = "replay-name"
    description = "Analyzes the replay's name."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return Path(replay_path).stem


class ReplayPath(MetadataAnalyzer):
    name = "replay-path"
    description = "Analyzes the replay's path."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return str(replay_path)


class MyWin(MetadataAnalyzer):
    """Result is "true"/"false", or "unknown" when the winning team cannot be determined."""

    name = "my-win"
    description = "Analyzes if the -me player won the game."
    is_boolean_result = True

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        if replay.computed is None or replay.computed.winner_team == 0:
            return "unknown"
        team = replay.players_by_id[require_me(replay, ctx)].team
        return bool_result(team == replay.computed.winner_team)


class MyGame(MetadataAnalyzer):
    name = "my-game"
    description = "Analyzes if the -me player played the game."
    is_boolean_result = True

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return bool_result(find_player_id(replay, ctx.me) != NO_PLAYER)


class MapName(MetadataAnalyzer):
    name = "map-name"
    description = (
        "Analyzes the map's name. Note that it doesn't do anything clever, so many versions "
        "of a map can have slightly different names, or two maps with the same name might "
        "be actually different."
    )

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return replay.map_name


class Is1v1(MetadataAnalyzer):
    name = "is-1v1"
    description = "Analyzes if the replay is of an 1v1 match."
    is_boolean_result = True

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        players = replay.players
        return bool_result(len(players) == 2 and players[0].team != players[1].team)


class Is2v2(MetadataAnalyzer):
    name = "is-2v2"
    description = "Analyzes if the replay is of a 2v2 match."
    is_boolean_result = True

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        p = replay.players
        return bool_result(
            len(p) == 4
            and p[0].team == p[1].team
            and p[1].team != p[2].team
            and p[2].team == p[3].team
        )
