"""
Analyzer catalog.

Maps analyzer names to prototype instances. Prototypes are never run
directly: callers clone them, bind arguments on the clone and use that.

Usage:
    from raszagal.analyzers import get_analyzer

    analyzer = get_analyzer("my-race-is").clone()
    analyzer.set_arguments(["zerg"])
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from raszagal.analyzers.base import (
    Analyzer,
    AnalyzerContext,
    MetadataAnalyzer,
    new_analyzer_context,
)
from raszagal.analyzers.basic import (
    Date,
    DateTime,
    Is1v1,
    Is2v2,
    IsThereARace,
    MapName,
    MyAPM,
    MyGame,
    MyName,
    MyRace,
    MyRaceIs,
    MyWin,
    ReplayName,
    ReplayPath,
)
from raszagal.analyzers.duration import (
    DurationMinutes,
    DurationMinutesIsGreaterThan,
    DurationMinutesIsLowerThan,
)
from raszagal.analyzers.matchup import Matchup, MatchupIs, MyMatchup, MyMatchupIs
from raszagal.analyzers.timings import (
    MyExtractorSeconds,
    MyFirstSpecificUnitSeconds,
    MyHatcherySeconds,
    MySpawningPoolSeconds,
)
from raszagal.errors import UnknownAnalyzerError

logger = logging.getLogger(__name__)

ANALYZER_CLASSES: tuple[type[Analyzer], ...] = (
    IsThereARace,
    MyAPM,
    MyRace,
    MyRaceIs,
    Date,
    DateTime,
    MyName,
    ReplayName,
    ReplayPath,
    MyWin,
    MyGame,
    MapName,
    Is1v1,
    Is2v2,
    DurationMinutes,
    DurationMinutesIsGreaterThan,
    DurationMinutesIsLowerThan,
    Matchup,
    MyMatchup,
    MatchupIs,
    MyMatchupIs,
    MyFirstSpecificUnitSeconds,
    MySpawningPoolSeconds,
    MyHatcherySeconds,
    MyExtractorSeconds,
)

_registry: Mapping[str, Analyzer] | None = None


def _build_registry() -> Mapping[str, Analyzer]:
    prototypes: dict[str, Analyzer] = {}
    for cls in sorted(ANALYZER_CLASSES, key=lambda c: c.name):
        if cls.name in prototypes:
            raise ValueError(f"duplicate analyzer name: {cls.name}")
        prototypes[cls.name] = cls()
    logger.debug(f"Registered {len(prototypes)} analyzers")
    return MappingProxyType(prototypes)


def get_analyzers() -> Mapping[str, Analyzer]:
    """All analyzer prototypes by name, sorted by name. Built on first use, read-only."""
    global _registry

    if _registry is None:
        _registry = _build_registry()

    return _registry


def get_analyzer(name: str) -> Analyzer:
    """
    Prototype for name.

    Raises:
        UnknownAnalyzerError: No analyzer has that name
    """
    try:
        return get_analyzers()[name]
    except KeyError:
        raise UnknownAnalyzerError(name) from None


def analyzer_names() -> list[str]:
    return list(get_analyzers())


__all__ = [
    "ANALYZER_CLASSES",
    "Analyzer",
    "AnalyzerContext",
    "MetadataAnalyzer",
    "analyzer_names",
    "get_analyzer",
    "get_analyzers",
    "new_analyzer_context",
]
