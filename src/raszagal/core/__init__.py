"""
Raszagal Core - Foundation modules shared by analyzers and the engine.

This module contains the fundamental components:
- constants: Game constants, races, command kinds and unit ids
- config: Application configuration and logging setup
- utils: File helpers and small utilities
"""

from raszagal.core.constants import (
    FRAME_DURATION_MS,
    NAME_TO_UNIT_ID,
    NO_PLAYER,
    RACE_NAME_TRANSLATIONS,
    REPLAY_EXTENSION,
    UNIT_ID_TO_NAME,
    CommandKind,
    RaceName,
)

__all__ = [
    # Enums
    "CommandKind",
    "RaceName",
    # Constants
    "FRAME_DURATION_MS",
    "NAME_TO_UNIT_ID",
    "NO_PLAYER",
    "RACE_NAME_TRANSLATIONS",
    "REPLAY_EXTENSION",
    "UNIT_ID_TO_NAME",
]
