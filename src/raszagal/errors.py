"""Exception classes raised while building and running analyzers.

None of these abort a run. The executor collects them into a flat list so a
batch over thousands of replays survives a handful of bad files.
"""

from __future__ import annotations


class RaszagalError(Exception):
    """Base error for this library."""


# ============================================================================
# Setup errors: reported before any replay is processed
# ============================================================================


class SetupError(RaszagalError):
    """Raised for a bad request, path or directory found while building a run."""


class UnknownAnalyzerError(SetupError):
    """Raised when an analyzer request names an analyzer missing from the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"analyzer for name {name} not found; ignoring")


class InvalidArgumentError(SetupError):
    """Raised by an analyzer's argument validator.

    Attributes:
        analyzer_name: Name of the analyzer the arguments were meant for, when known.
    """

    def __init__(self, message: str, analyzer_name: str | None = None) -> None:
        self.analyzer_name = analyzer_name
        super().__init__(message)


class ReplayPathError(SetupError):
    """Raised when a requested replay path does not exist or cannot be inspected."""

    def __init__(self, path: str, reason: str = "replay path not found") -> None:
        self.path = path
        super().__init__(f"{reason}: {path}")


class CopyDirectoryError(SetupError):
    """Raised when the copy destination directory is missing or unusable."""

    def __init__(self, path: str, reason: str = "output directory doesn't exist") -> None:
        self.path = path
        super().__init__(f"{reason}: {path}")


# ============================================================================
# Per-replay errors: the replay is skipped
# ============================================================================


class ReplayError(RaszagalError):
    """Base class for failures scoped to a single replay."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class ReplayParseError(ReplayError):
    """Raised when the decoder cannot parse a replay file."""


class ReplayComputeError(ReplayError):
    """Raised when computing derived statistics blows up inside the decoder model."""


# ============================================================================
# Per-analyzer errors: the analyzer is dropped for the current replay
# ============================================================================


class AnalyzerError(RaszagalError):
    """Raised by an analyzer during either evaluation phase."""


class PlayerNotFoundError(AnalyzerError):
    """Raised by player-relative analyzers when no -me player is in the replay."""

    def __init__(self) -> None:
        super().__init__("-me player not present in this replay")


# ============================================================================
# Output errors
# ============================================================================


class OutputError(RaszagalError):
    """Raised when an output sink fails to write."""


class CopyError(RaszagalError):
    """Raised when a matching replay cannot be copied to the destination directory."""
