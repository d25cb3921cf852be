"""Argument validators.

Each validator receives the raw string arguments of an analyzer request and
returns them normalized, or raises InvalidArgumentError.
"""

from __future__ import annotations

from raszagal.core.constants import NAME_TO_UNIT_ID, RACE_LETTERS, RACE_NAME_TRANSLATIONS
from raszagal.errors import InvalidArgumentError


def no_arguments(args: list[str]) -> list[str]:
    return []


def race(args: list[str]) -> list[str]:
    """Case-insensitive race name or alias -> canonical race name."""
    if not args:
        raise InvalidArgumentError("please provide a valid race name e.g. Zerg/Protoss/Terran")
    canonical = RACE_NAME_TRANSLATIONS.get(args[0].strip().lower())
    if canonical is None:
        valid = ", ".join(sorted(RACE_NAME_TRANSLATIONS))
        raise InvalidArgumentError(f"invalid race name {args[0]}; valid names are: {valid}")
    return [str(canonical)]


def minutes(args: list[str]) -> list[str]:
    if not args:
        raise InvalidArgumentError("please provide a valid number of minutes")
    try:
        value = int(args[0])
    except ValueError:
        raise InvalidArgumentError(f"invalid number of minutes: {args[0]}")
    return [str(value)]


def _matchup_races(args: list[str]) -> list[str]:
    if not args or len(args[0]) != 3 or args[0][1].lower() != "v":
        raise InvalidArgumentError("please provide a valid 1v1 matchup e.g. TvZ")
    text = args[0].upper()
    races = [text[0], text[2]]
    for letter in races:
        if letter not in RACE_LETTERS:
            raise InvalidArgumentError(f"invalid race letter {letter} in matchup {args[0]}")
    return races


def matchup(args: list[str]) -> list[str]:
    """Order-insensitive 1v1 matchup: ZvT becomes ["T", "Z"]."""
    return sorted(_matchup_races(args))


def ordered_matchup(args: list[str]) -> list[str]:
    """Perspective 1v1 matchup: ZvT becomes ["Z", "T"], the -me player's race first."""
    return _matchup_races(args)


def unit(args: list[str]) -> list[str]:
    """Unit/building/evolution name -> its unit ID, as a string."""
    if not args:
        raise InvalidArgumentError(
            "please provide a valid unit/building/evolution name e.g. Zergling"
        )
    name = args[0].strip()
    unit_id = NAME_TO_UNIT_ID.get(name)
    if unit_id is None:
        folded = {k.lower(): v for k, v in NAME_TO_UNIT_ID.items()}
        unit_id = folded.get(name.lower())
    if unit_id is None:
        raise InvalidArgumentError(f"invalid unit/building/evolution name: {args[0]}")
    return [str(unit_id)]
