"""
Analyzer contract.

An Analyzer determines one fact about a replay, e.g. whether the game is a 1v1
or when the -me player started their first Spawning Pool. Every analyzer goes
through the same two-phase protocol for each replay:

1. start_reading_replay(): metadata phase. Header and derived stats only, never
   the command stream. Returning True resolves the analyzer for this replay.
2. process_command(): streaming phase, once per command in order, only while
   the analyzer has not returned True yet.

Analyzers are stateful. The catalog holds prototypes which are cloned for
every request and again for every replay, so state never leaks across runs.
Errors are raised; the executor treats them as soft failures scoped to one
analyzer on one replay.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from raszagal.analyzers.validators import no_arguments
from raszagal.core.constants import NO_PLAYER
from raszagal.errors import InvalidArgumentError, PlayerNotFoundError
from raszagal.replay import find_player_id

if TYPE_CHECKING:
    from raszagal.replay import Command, Replay

ArgumentValidator = Callable[[list[str]], list[str]]


@dataclass(frozen=True)
class AnalyzerContext:
    """Everything besides the replay that analyzers need, e.g. who "me" is."""

    me: frozenset[str] = field(default_factory=frozenset)


def new_analyzer_context(me: Iterable[str] = ()) -> AnalyzerContext:
    """Build a context from player names, ignoring surrounding blanks and empty names."""
    return AnalyzerContext(me=frozenset(n.strip() for n in me if n and n.strip()))


class Analyzer(ABC):
    """
    Base class for all analyzers.

    Subclasses declare their metadata as class attributes and implement
    start_reading_replay(), plus process_command() when they need commands.
    """

    # Hyphenated, unique; used as CLI flag and in depends_on
    name: ClassVar[str]
    description: ClassVar[str] = ""
    # Bump on any behavior change so cached results can be invalidated
    version: ClassVar[int] = 1
    # Reserved for dependency ordering; the executor does not resolve it
    depends_on: ClassVar[frozenset[str]] = frozenset()
    # CLI exposure: string flag (takes arguments) vs boolean flag
    is_string_flag: ClassVar[bool] = False
    # Result is the literal "true"/"false", so filter--/filter-not-- variants exist
    is_boolean_result: ClassVar[bool] = False
    requires_parsing_commands: ClassVar[bool] = False
    argument_validator: ClassVar[ArgumentValidator] = staticmethod(no_arguments)

    def __init__(self) -> None:
        self.args: list[str] = []
        self.result: str = ""
        self.done: bool = False

    def set_arguments(self, args: list[str]) -> None:
        """
        Validate and bind arguments. Called once, before any replay.

        Raises:
            InvalidArgumentError: The analyzer must not be scheduled for this run
        """
        try:
            self.args = type(self).argument_validator(list(args))
        except InvalidArgumentError as e:
            if e.analyzer_name is None:
                e.analyzer_name = self.name
            raise

    @abstractmethod
    def start_reading_replay(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> bool:
        """Metadata phase. Returns True if the result is already final."""

    def process_command(self, command: Command) -> bool:
        """Streaming phase. Returns True once the result is final."""
        self.done = True
        return True

    def is_done(self) -> tuple[str, bool]:
        """Current result and whether it is final. Only valid after start_reading_replay()."""
        return self.result, self.done

    def clone(self) -> "Analyzer":
        """Independent copy, arguments and internal state included."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, args={self.args!r})"


class MetadataAnalyzer(Analyzer):
    """
    Analyzer resolved entirely in the metadata phase.

    Subclasses implement analyze() returning the result string.
    """

    def start_reading_replay(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> bool:
        self.result, self.done = "", False
        self.result = self.analyze(replay, ctx, replay_path)
        self.done = True
        return True

    @abstractmethod
    def analyze(self, replay: Replay, ctx: AnalyzerContext, replay_path: str) -> str:
        """Compute the result from header and derived stats."""


def bool_result(value: bool) -> str:
    return "true" if value else "false"


def require_me(replay: Replay, ctx: AnalyzerContext) -> int:
    """
    Player id of the -me player.

    Raises:
        PlayerNotFoundError: None of the -me names plays in this replay
    """
    player_id = find_player_id(replay, ctx.me)
    if player_id == NO_PLAYER:
        raise PlayerNotFoundError()
    return player_id
