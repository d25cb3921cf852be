"""
Raszagal - StarCraft: Brood War Replay Analyzer

Runs composable analyzers over .rep files and emits one row per replay, or
filters replays by analyzer results.

Usage:
    from raszagal import AnalyzerExecutor, new_analyzer_context

    executor = AnalyzerExecutor(
        ["game.rep"],
        [["my-race"], ["matchup"], ["filter--is-1v1"]],
        new_analyzer_context(["adultrabbit"]),
    )
    rows, errors = executor.execute_with_results()
"""

__version__ = "0.1.0"
__author__ = "Raszagal Contributors"


def __getattr__(name):
    """Lazy import so `raszagal.__version__` stays cheap."""
    if name == "AnalyzerExecutor":
        from raszagal.executor import AnalyzerExecutor
        return AnalyzerExecutor
    elif name == "parse_analyzer_request":
        from raszagal.executor import parse_analyzer_request
        return parse_analyzer_request
    elif name == "new_analyzer_context":
        from raszagal.analyzers import new_analyzer_context
        return new_analyzer_context
    elif name == "get_analyzers":
        from raszagal.analyzers import get_analyzers
        return get_analyzers
    elif name == "parse_replay":
        from raszagal.replay import parse_replay
        return parse_replay
    elif name == "make_output":
        from raszagal.output import make_output
        return make_output
    raise AttributeError(f"module 'raszagal' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Engine
    "AnalyzerExecutor",
    "parse_analyzer_request",
    "new_analyzer_context",
    "get_analyzers",
    # Decoding
    "parse_replay",
    # Output
    "make_output",
]
