"""
Build timing analyzers.

These are the only analyzers that need the command stream: they scan commands
in order and stop at the first build/train/morph of the unit they look for.
"-1" means the -me player never made that unit.
"""

from __future__ import annotations

from raszagal.analyzers import validators
from raszagal.analyzers.base import Analyzer, AnalyzerContext
from raszagal.core.constants import NAME_TO_UNIT_ID, NO_PLAYER
from raszagal.replay import Command, Replay, find_player_id, first_unit_seconds


class _FirstUnitSeconds(Analyzer):
    """Seconds until the -me player first creates unit_id."""

    requires_parsing_commands = True

    def __init__(self) -> None:
        super().__init__()
        self.player_id = NO_PLAYER
        self.unit_id: int | None = None

    def target_unit_id(self) -> int:
        raise NotImplementedError

    def start_reading_replay(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> bool:
        self.result = "-1"
        self.unit_id = self.target_unit_id()
        self.player_id = find_player_id(replay, ctx.me)
        # Without a -me player there is nothing to look for
        self.done = self.player_id == NO_PLAYER
        return self.done

    def process_command(self, command: Command) -> bool:
        self.result, self.done = first_unit_seconds(command, self.player_id, self.unit_id)
        return self.done


class MyFirstSpecificUnitSeconds(_FirstUnitSeconds):
    name = "my-first-specific-unit-seconds"
    description = (
        "Analyzes the time the first specified unit/building/evolution was built, in seconds. "
        "-1 if the unit never appears."
    )
    is_string_flag = True
    argument_validator = staticmethod(validators.unit)

    def target_unit_id(self) -> int:
        return int(self.args[0])


class _FixedUnitSeconds(_FirstUnitSeconds):
    unit_name: str

    def target_unit_id(self) -> int:
        return NAME_TO_UNIT_ID[self.unit_name]


class MySpawningPoolSeconds(_FixedUnitSeconds):
    name = "my-spawning-pool-seconds"
    description = "Analyzes the time the first Spawning Pool was built, in seconds."
    unit_name = "Spawning Pool"


class MyHatcherySeconds(_FixedUnitSeconds):
    name = "my-hatchery-seconds"
    description = "Analyzes the time the first Hatchery was built, in seconds."
    unit_name = "Hatchery"


class MyExtractorSeconds(_FixedUnitSeconds):
    name = "my-extractor-seconds"
    description = "Analyzes the time the first Extractor was built, in seconds."
    unit_name = "Extractor"
