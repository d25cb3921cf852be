"""Replay factories and a parser that never runs screp."""

from datetime import datetime
from pathlib import Path

from raszagal.core.constants import CommandKind
from raszagal.replay import Command, Player, Race, Replay

ME = "adultrabbit"
OPPONENT = "Bisu"

# 12 minutes at 42ms per frame
TWELVE_MINUTES_FRAMES = 17143


def build_replay(
    path="game.rep",
    players=None,
    commands=None,
    frames=TWELVE_MINUTES_FRAMES,
    map_name="Fighting Spirit",
    start_time=datetime(2023, 5, 17, 21, 30, 5),
    raw_computed=None,
) -> Replay:
    """A Zerg (adultrabbit) vs Protoss (Bisu) 1v1 unless told otherwise."""
    if players is None:
        players = [
            Player(id=0, name=ME, race=Race.from_name("Zerg"), team=1),
            Player(id=1, name=OPPONENT, race=Race.from_name("Protoss"), team=2),
        ]
    if commands is None:
        commands = zvp_commands()
    return Replay(
        path=Path(path),
        map_name=map_name,
        frames=frames,
        players=players,
        commands=commands,
        start_time=start_time,
        raw_computed=raw_computed,
    )


def zvp_commands() -> list[Command]:
    """Pool at 84s and Hatchery at 210s for adultrabbit; no Extractor."""
    return [
        Command(frame=50, player_id=0, kind=CommandKind.TRAIN, unit_id=0x29, unit_name="Drone"),
        Command(frame=60, player_id=1, kind=CommandKind.TRAIN, unit_id=0x40, unit_name="Probe"),
        Command(frame=1500, player_id=1, kind=CommandKind.BUILD, unit_id=0x9C, unit_name="Pylon"),
        Command(frame=2000, player_id=0, kind=CommandKind.BUILD, unit_id=0x8E, unit_name="Spawning Pool"),
        Command(frame=3000, player_id=0, kind=CommandKind.OTHER),
        Command(frame=5000, player_id=0, kind=CommandKind.BUILD, unit_id=0x83, unit_name="Hatchery"),
        Command(frame=6000, player_id=0, kind=CommandKind.TRAIN, unit_id=0x25, unit_name="Zergling"),
    ]


def players_from(*specs) -> list[Player]:
    """Players from (name, race, team) tuples, ids in listing order."""
    return [
        Player(id=i, name=name, race=Race.from_name(race), team=team)
        for i, (name, race, team) in enumerate(specs)
    ]


class FakeParser:
    """Serves prebuilt replays (or raises prebuilt errors) by path."""

    def __init__(self, replays=None):
        self.replays = dict(replays or {})
        self.parsed = []

    def parse(self, replay_path):
        path = str(replay_path)
        self.parsed.append(path)
        value = self.replays[path]
        if isinstance(value, Exception):
            raise value
        return value


