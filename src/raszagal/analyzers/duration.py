"""Game length analyzers."""

from __future__ import annotations

from raszagal.analyzers import validators
from raszagal.analyzers.base import AnalyzerContext, MetadataAnalyzer, bool_result
from raszagal.replay import Replay


def duration_minutes(replay: Replay) -> int:
    return int(replay.duration.total_seconds() // 60)


class DurationMinutes(MetadataAnalyzer):
    name = "duration-minutes"
    description = "Analyzes the duration of the replay in minutes."

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return str(duration_minutes(replay))


class DurationMinutesIsGreaterThan(MetadataAnalyzer):
    name = "duration-minutes-is-greater-than"
    description = "Analyzes if the duration of the replay in minutes is greater than specified."
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.minutes)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return bool_result(duration_minutes(replay) > int(self.args[0]))


class DurationMinutesIsLowerThan(MetadataAnalyzer):
    name = "duration-minutes-is-lower-than"
    description = "Analyzes if the duration of the replay in minutes is lower than specified."
    is_string_flag = True
    is_boolean_result = True
    argument_validator = staticmethod(validators.minutes)

    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        return bool_result(duration_minutes(replay) < int(self.args[0]))
