"""Tests for the replay model and the screp adapter."""

import json
import subprocess
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from factories import ME, OPPONENT, build_replay, players_from
from raszagal.core.constants import NO_PLAYER, CommandKind
from raszagal.errors import ReplayParseError
from raszagal.replay import (
    Command,
    Race,
    ScrepParser,
    find_player_id,
    first_unit_seconds,
    replay_from_dict,
)


def screp_document():
    """A trimmed-down `screp -cmds` output for a ZvP."""
    return {
        "Header": {
            "Map": "Fighting Spirit",
            "Frames": 17143,
            "StartTime": "2023-05-17T21:30:05Z",
            "Players": [
                {
                    "ID": 0,
                    "SlotID": 0,
                    "Name": ME,
                    "Race": {"Name": "Zerg", "Letter": 90},
                    "Team": 1,
                    "Type": {"Name": "Human"},
                },
                {
                    "ID": 1,
                    "SlotID": 1,
                    "Name": OPPONENT,
                    "Race": {"Name": "Protoss", "Letter": 80},
                    "Team": 2,
                    "Type": {"Name": "Human"},
                },
            ],
        },
        "Commands": {
            "Cmds": [
                {"Frame": 10, "PlayerID": 0, "Type": {"Name": "Select"}},
                {
                    "Frame": 2000,
                    "PlayerID": 0,
                    "Type": {"Name": "Build"},
                    "Unit": {"ID": 142, "Name": "Spawning Pool"},
                },
            ]
        },
        "Computed": {
            "WinnerTeam": 1,
            "PlayerDescs": [
                {"PlayerID": 0, "CmdCount": 3000, "APM": 250, "EAPM": 180},
                {"PlayerID": 1, "CmdCount": 2600, "APM": 216, "EAPM": 170},
            ],
        },
    }


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# =============================================================================
# Model
# =============================================================================


class TestReplayModel:
    """Tests for the Replay dataclass."""

    def test_duration_uses_42ms_frames(self):
        """Duration is frames times 42 milliseconds."""
        replay = build_replay(frames=1000)
        assert replay.duration == timedelta(milliseconds=42000)

    def test_command_seconds(self):
        """Command seconds are whole seconds, rounded down."""
        assert Command(frame=2000, player_id=0).seconds == 84
        assert Command(frame=23, player_id=0).seconds == 0

    def test_matchup_groups_by_team(self):
        """Race letters are grouped by team, in listing order."""
        replay = build_replay(
            players=players_from(
                ("a", "Terran", 1), ("b", "Zerg", 2), ("c", "Protoss", 1), ("d", "Zerg", 2)
            )
        )
        assert replay.matchup() == "TPvZZ"

    def test_players_by_id(self, zvp_replay):
        """Players can be looked up by id."""
        assert zvp_replay.players_by_id[1].name == OPPONENT

    def test_race_from_name(self):
        """Race letter is the first letter of the name."""
        assert Race.from_name("Protoss") == Race(name="Protoss", letter="P")


class TestCompute:
    """Tests for derived statistics."""

    def test_compute_uses_screp_block(self):
        """The Computed block from screp is used when present."""
        replay = replay_from_dict(screp_document(), "game.rep")
        stats = replay.compute()

        assert stats.winner_team == 1
        assert stats.desc_for(0).apm == 250
        assert replay.computed is stats

    def test_compute_counts_commands_without_screp_block(self, zvp_replay):
        """Without a Computed block, APM comes from command counts and the winner is unknown."""
        stats = zvp_replay.compute()

        # 5 commands for player 0 over 12 minutes
        assert stats.desc_for(0).cmd_count == 5
        assert stats.desc_for(0).apm == 0
        assert stats.winner_team == 0

    def test_compute_raises_on_malformed_block(self):
        """Malformed computed data raises instead of silently producing stats."""
        replay = build_replay(raw_computed={"PlayerDescs": [{"APM": 10}]})
        with pytest.raises(KeyError):
            replay.compute()

    def test_desc_for_unknown_player(self, zvp_replay):
        """Unknown player ids have no stats."""
        assert zvp_replay.compute().desc_for(5) is None


# =============================================================================
# screp JSON
# =============================================================================


class TestReplayFromDict:
    """Tests for converting screp output into a Replay."""

    def test_header_fields(self):
        """Map, frames and start time are read from the header."""
        replay = replay_from_dict(screp_document(), "game.rep")

        assert replay.map_name == "Fighting Spirit"
        assert replay.frames == 17143
        assert replay.start_time.year == 2023
        assert str(replay.path) == "game.rep"

    def test_players_keep_order(self):
        """Players keep their header order; rune letters become characters."""
        replay = replay_from_dict(screp_document(), "game.rep")

        assert [p.name for p in replay.players] == [ME, OPPONENT]
        assert replay.players[0].race == Race(name="Zerg", letter="Z")
        assert replay.players[1].team == 2

    def test_commands(self):
        """Unit-creating commands carry the unit; others collapse to OTHER."""
        replay = replay_from_dict(screp_document(), "game.rep")

        select, build = replay.commands
        assert select.kind == CommandKind.OTHER
        assert select.unit_id is None
        assert build.kind == CommandKind.BUILD
        assert build.unit_id == 0x8E
        assert build.unit_name == "Spawning Pool"

    def test_missing_sections(self):
        """A document without commands or computed stats still converts."""
        replay = replay_from_dict({"Header": {"Map": "Python"}}, "x.rep")

        assert replay.commands == []
        assert replay.players == []
        assert replay.raw_computed is None

    def test_bad_start_time_is_ignored(self):
        """An unparseable start time becomes None."""
        doc = screp_document()
        doc["Header"]["StartTime"] = "yesterday"
        assert replay_from_dict(doc, "game.rep").start_time is None

    def test_start_time_parses_timezone(self):
        """ISO timestamps with a Z suffix keep their timezone."""
        replay = replay_from_dict(screp_document(), "game.rep")
        assert replay.start_time.replace(tzinfo=None) == datetime(2023, 5, 17, 21, 30, 5)


class TestScrepParser:
    """Tests for ScrepParser, with subprocess mocked."""

    def test_parse_runs_screp_with_commands(self):
        """screp is invoked with -cmds and its JSON becomes a Replay."""
        with patch("raszagal.replay.subprocess.run") as run:
            run.return_value = completed(stdout=json.dumps(screp_document()))
            replay = ScrepParser("/opt/screp", timeout_seconds=5).parse("game.rep")

        args, kwargs = run.call_args
        assert args[0] == ["/opt/screp", "-cmds", "game.rep"]
        assert kwargs["timeout"] == 5
        assert replay.map_name == "Fighting Spirit"

    def test_missing_executable(self):
        """A missing screp binary is a parse error."""
        with patch("raszagal.replay.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(ReplayParseError, match="not found"):
                ScrepParser("nope").parse("game.rep")

    def test_timeout(self):
        """A screp timeout is a parse error."""
        side_effect = subprocess.TimeoutExpired(cmd="screp", timeout=1)
        with patch("raszagal.replay.subprocess.run", side_effect=side_effect):
            with pytest.raises(ReplayParseError, match="timed out"):
                ScrepParser(timeout_seconds=1).parse("game.rep")

    def test_nonzero_exit(self):
        """A failing screp run is a parse error carrying stderr."""
        with patch("raszagal.replay.subprocess.run") as run:
            run.return_value = completed(returncode=1, stderr="not a replay")
            with pytest.raises(ReplayParseError, match="not a replay") as exc_info:
                ScrepParser().parse("broken.rep")

        assert exc_info.value.path == "broken.rep"

    def test_invalid_json(self):
        """Garbage on stdout is a parse error."""
        with patch("raszagal.replay.subprocess.run") as run:
            run.return_value = completed(stdout="{not json")
            with pytest.raises(ReplayParseError, match="invalid JSON"):
                ScrepParser().parse("game.rep")

    def test_unexpected_document_shape(self):
        """Valid JSON with the wrong shape is a parse error."""
        with patch("raszagal.replay.subprocess.run") as run:
            run.return_value = completed(stdout=json.dumps({"Header": {"Players": [{"ID": "x"}]}}))
            with pytest.raises(ReplayParseError, match="unexpected screp output"):
                ScrepParser().parse("game.rep")


# =============================================================================
# Helpers
# =============================================================================


class TestFindPlayerId:
    """Tests for locating the -me player."""

    def test_found(self, zvp_replay):
        """Any of the names matches."""
        assert find_player_id(zvp_replay, {"someone", OPPONENT}) == 1

    def test_not_found(self, zvp_replay):
        """No match yields NO_PLAYER."""
        assert find_player_id(zvp_replay, {"someone"}) == NO_PLAYER

    def test_empty_names(self, zvp_replay):
        """No names never match."""
        assert find_player_id(zvp_replay, set()) == NO_PLAYER


class TestFirstUnitSeconds:
    """Tests for the unit-creation matcher."""

    def test_match(self):
        """A build of the unit by the player matches with its seconds."""
        cmd = Command(frame=2000, player_id=0, kind=CommandKind.BUILD, unit_id=0x8E)
        assert first_unit_seconds(cmd, 0, 0x8E) == ("84", True)

    @pytest.mark.parametrize(
        "cmd",
        [
            Command(frame=2000, player_id=1, kind=CommandKind.BUILD, unit_id=0x8E),
            Command(frame=2000, player_id=0, kind=CommandKind.BUILD, unit_id=0x83),
            Command(frame=2000, player_id=0, kind=CommandKind.OTHER, unit_id=0x8E),
        ],
        ids=["other-player", "other-unit", "not-a-creation"],
    )
    def test_no_match(self, cmd):
        """Anything else does not match."""
        assert first_unit_seconds(cmd, 0, 0x8E) == ("-1", False)

    def test_morph_matches(self):
        """Morphs count as creation."""
        cmd = Command(frame=1000, player_id=0, kind=CommandKind.BUILDING_MORPH, unit_id=0x84)
        assert first_unit_seconds(cmd, 0, 0x84) == ("42", True)
