"""
Replay Model and screp Decoder Adapter

Wraps the screp command line tool to decode StarCraft: Brood War .rep files,
providing structured, read-only access to players, header metadata and the
ordered command stream consumed by analyzers.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from raszagal.core.constants import (
    FRAME_DURATION_MS,
    NO_PLAYER,
    UNIT_CREATION_KINDS,
    CommandKind,
)
from raszagal.errors import ReplayParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Race:
    """A player's race."""

    name: str
    letter: str

    @classmethod
    def from_name(cls, name: str) -> "Race":
        return cls(name=name, letter=name[:1].upper())


@dataclass
class Player:
    """A player listed in the replay header."""

    id: int
    name: str
    race: Race
    team: int
    slot_id: int = 0
    type: str = "Human"


@dataclass
class Command:
    """A single in-game command, in the order it was issued."""

    frame: int
    player_id: int
    kind: CommandKind = CommandKind.OTHER
    unit_id: Optional[int] = None
    unit_name: str = ""

    @property
    def seconds(self) -> int:
        """Whole seconds since game start."""
        return self.frame * FRAME_DURATION_MS // 1000


@dataclass
class PlayerDesc:
    """Derived per-player statistics."""

    player_id: int
    cmd_count: int
    apm: int
    eapm: int = 0


@dataclass
class ComputedStats:
    """Derived statistics block. A winner_team of 0 means it could not be determined."""

    winner_team: int = 0
    player_descs: list[PlayerDesc] = field(default_factory=list)

    def desc_for(self, player_id: int) -> Optional[PlayerDesc]:
        for desc in self.player_descs:
            if desc.player_id == player_id:
                return desc
        return None


@dataclass
class Replay:
    """Parsed replay container."""

    path: Path
    map_name: str
    frames: int
    players: list[Player]
    commands: list[Command] = field(default_factory=list)
    start_time: Optional[datetime] = None

    # Raw "Computed" section as emitted by screp, if any
    raw_computed: Optional[dict[str, Any]] = None
    # Populated by compute()
    computed: Optional[ComputedStats] = None

    @property
    def duration(self) -> timedelta:
        return timedelta(milliseconds=self.frames * FRAME_DURATION_MS)

    @property
    def players_by_id(self) -> dict[int, Player]:
        return {p.id: p for p in self.players}

    def matchup(self) -> str:
        """
        Race letters grouped by team, teams joined by "v" (e.g. "ZvP", "TPvZZ").

        Teams appear in the order their first player is listed.
        """
        teams: dict[int, list[str]] = {}
        for player in self.players:
            teams.setdefault(player.team, []).append(player.race.letter.upper())
        return "v".join("".join(letters) for letters in teams.values())

    def compute(self) -> ComputedStats:
        """
        Compute derived statistics (per-player APM and winning team).

        Uses screp's computed block when present; otherwise counts commands per
        player. Malformed computed data raises, which callers must be ready for.
        """
        if self.raw_computed is not None:
            self.computed = _computed_from_dict(self.raw_computed)
            return self.computed

        counts = Counter(c.player_id for c in self.commands)
        minutes = self.duration.total_seconds() / 60
        descs = []
        for player in self.players:
            count = counts.get(player.id, 0)
            apm = int(count / minutes) if minutes > 0 else 0
            descs.append(PlayerDesc(player_id=player.id, cmd_count=count, apm=apm))
        self.computed = ComputedStats(winner_team=0, player_descs=descs)
        return self.computed


class ReplayParser(Protocol):
    """Anything able to turn a replay path into a Replay."""

    def parse(self, replay_path: str | Path) -> Replay: ...


# ============================================================================
# screp JSON -> Replay
# ============================================================================


def _race_from_dict(data: Optional[dict[str, Any]]) -> Race:
    data = data or {}
    name = str(data.get("Name", "") or "")
    letter = data.get("Letter", "")
    # screp serializes the race letter as a Go rune (an int)
    if isinstance(letter, int):
        letter = chr(letter) if letter else ""
    letter = str(letter) or name[:1]
    return Race(name=name, letter=letter.upper())


def _player_from_dict(data: dict[str, Any]) -> Player:
    player_type = data.get("Type") or {}
    return Player(
        id=int(data.get("ID", 0)),
        slot_id=int(data.get("SlotID", 0)),
        name=str(data.get("Name", "")),
        race=_race_from_dict(data.get("Race")),
        team=int(data.get("Team", 0)),
        type=str(player_type.get("Name", "Human")) if isinstance(player_type, dict) else str(player_type),
    )


def _command_kind(type_name: str) -> CommandKind:
    try:
        return CommandKind(type_name)
    except ValueError:
        return CommandKind.OTHER


def _command_from_dict(data: dict[str, Any]) -> Command:
    cmd_type = data.get("Type") or {}
    kind = _command_kind(str(cmd_type.get("Name", "")))
    unit_id = None
    unit_name = ""
    if kind in UNIT_CREATION_KINDS:
        unit = data.get("Unit") or {}
        if "ID" in unit:
            unit_id = int(unit["ID"])
        unit_name = str(unit.get("Name", ""))
    return Command(
        frame=int(data.get("Frame", 0)),
        player_id=int(data.get("PlayerID", NO_PLAYER)),
        kind=kind,
        unit_id=unit_id,
        unit_name=unit_name,
    )


def _computed_from_dict(data: dict[str, Any]) -> ComputedStats:
    descs = [
        PlayerDesc(
            player_id=int(d["PlayerID"]),
            cmd_count=int(d.get("CmdCount", 0)),
            apm=int(d.get("APM", 0)),
            eapm=int(d.get("EAPM", 0)),
        )
        for d in data.get("PlayerDescs") or []
    ]
    return ComputedStats(winner_team=int(data.get("WinnerTeam") or 0), player_descs=descs)


def _parse_start_time(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.debug(f"Unparseable replay start time: {value!r}")
        return None


def replay_from_dict(data: dict[str, Any], replay_path: str | Path) -> Replay:
    """
    Build a Replay from screp's JSON output.

    Args:
        data: Decoded JSON document (Header, Commands and optionally Computed)
        replay_path: Path of the replay the document was produced from

    Returns:
        Replay with players and commands in their original order
    """
    header = data.get("Header") or {}
    commands = (data.get("Commands") or {}).get("Cmds") or []
    return Replay(
        path=Path(replay_path),
        map_name=str(header.get("Map", "")),
        frames=int(header.get("Frames", 0)),
        start_time=_parse_start_time(header.get("StartTime")),
        players=[_player_from_dict(p) for p in header.get("Players") or []],
        commands=[_command_from_dict(c) for c in commands],
        raw_computed=data.get("Computed"),
    )


# ============================================================================
# Parser
# ============================================================================


class ScrepParser:
    """
    Parser for Brood War replay files.

    Runs the screp executable (https://github.com/icza/screp) and converts its
    JSON output into a Replay.
    """

    def __init__(self, screp_path: str = "screp", timeout_seconds: float = 60.0):
        """
        Initialize the parser.

        Args:
            screp_path: Name or path of the screp executable
            timeout_seconds: Maximum time to wait for screp on a single replay
        """
        self.screp_path = screp_path
        self.timeout_seconds = timeout_seconds

    def parse(self, replay_path: str | Path) -> Replay:
        """
        Parse a replay file.

        Raises:
            ReplayParseError: If screp is missing, fails, times out or prints invalid JSON
        """
        path = str(replay_path)
        cmd = [self.screp_path, "-cmds", path]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError:
            raise ReplayParseError(path, f"screp executable not found: {self.screp_path}")
        except subprocess.TimeoutExpired:
            raise ReplayParseError(
                path, f"screp timed out after {self.timeout_seconds}s parsing replay {path}"
            )

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ReplayParseError(path, f"screp failed to parse replay {path}: {stderr}")

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ReplayParseError(path, f"screp returned invalid JSON for replay {path}: {e}")

        try:
            return replay_from_dict(data, path)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ReplayParseError(path, f"unexpected screp output for replay {path}: {e}") from e


def parse_replay(replay_path: str | Path, screp_path: str = "screp") -> Replay:
    """Convenience function to parse a replay file with screp."""
    return ScrepParser(screp_path).parse(replay_path)


# ============================================================================
# Helpers shared by analyzers
# ============================================================================


def find_player_id(replay: Replay, names: Iterable[str]) -> int:
    """Id of the first player whose name is in names, or NO_PLAYER."""
    names = set(names)
    for player in replay.players:
        if player.name in names:
            return player.id
    return NO_PLAYER


def first_unit_seconds(command: Command, player_id: int, unit_id: int) -> tuple[str, bool]:
    """
    Check whether command creates unit_id for player_id.

    Returns:
        ("<seconds>", True) on a match, ("-1", False) otherwise
    """
    if (
        command.player_id == player_id
        and command.kind in UNIT_CREATION_KINDS
        and command.unit_id == unit_id
    ):
        return str(command.seconds), True
    return "-1", False
