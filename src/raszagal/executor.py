"""
Analyzer Execution Engine

Runs a set of analyzer requests over a set of replay files and streams one
result row per accepted replay to an Output sink.

Each replay goes through two phases:
1. Metadata: every wrapper, in order, gets start_reading_replay(). Most
   analyzers resolve here and never see a command.
2. Streaming: one pass over the command stream, feeding only the wrappers
   still unresolved. The pass stops as soon as none are left.

A filter that resolves to a rejecting result ends the replay at once, so a
replay excluded by metadata filters never touches its command stream.

Nothing here raises out of execute(): setup, replay and analyzer errors are
logged and returned as a flat list.

Usage:
    from raszagal.executor import AnalyzerExecutor
    from raszagal.analyzers import new_analyzer_context

    executor = AnalyzerExecutor(
        ["game.rep"],
        [["my-race"], ["filter--is-1v1"]],
        new_analyzer_context(["adultrabbit"]),
    )
    rows, errors = executor.execute_with_results()
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from raszagal.analyzers import AnalyzerContext, new_analyzer_context
from raszagal.core.constants import REPLAY_EXTENSION
from raszagal.core.utils import copy_file, is_file_exist, timed, unmarshal_arguments
from raszagal.errors import (
    AnalyzerError,
    CopyDirectoryError,
    CopyError,
    OutputError,
    RaszagalError,
    ReplayComputeError,
    ReplayError,
    ReplayPathError,
)
from raszagal.output import NoOutput, Output
from raszagal.replay import Replay, ReplayParser, ScrepParser
from raszagal.scheduling import AnalyzerWrapper, clone_wrappers, create_sorted_wrappers

logger = logging.getLogger(__name__)


# ============================================================================
# Inputs
# ============================================================================


def parse_analyzer_request(text: str) -> list[str]:
    """
    Turn the CLI form of a request into [name, *args].

    "my-race-is=zerg" -> ["my-race-is", "zerg"]
    "filter--matchup-is=ZvT" -> ["filter--matchup-is", "ZvT"]
    "is-1v1" -> ["is-1v1"]
    """
    name, _, args = text.strip().partition("=")
    return [name.strip(), *unmarshal_arguments(args)]


def filter_replay_paths(
    replay_paths: Iterable[str], extension: str = REPLAY_EXTENSION
) -> tuple[list[str], list[Exception]]:
    """
    Trim, dedupe and validate replay paths.

    Paths without the replay extension are silently skipped. Missing paths are
    reported.

    Returns:
        (sorted existing paths, errors)
    """
    unique = {p.strip() for p in replay_paths}
    paths: list[str] = []
    errors: list[Exception] = []

    for replay_path in unique:
        if len(replay_path) <= len(extension) or not replay_path.endswith(extension):
            continue
        try:
            exists = is_file_exist(replay_path)
        except OSError as e:
            errors.append(ReplayPathError(replay_path, f"error locating replay path ({e})"))
            continue
        if not exists:
            errors.append(ReplayPathError(replay_path))
            continue
        paths.append(replay_path)

    return sorted(paths), errors


def discover_replays(directory: str | Path, extension: str = REPLAY_EXTENSION) -> list[str]:
    """Recursively collect replay files under directory, sorted. Unreadable entries are skipped."""
    found: list[str] = []
    for root, _dirs, files in os.walk(directory):
        for filename in files:
            if len(filename) > len(extension) and filename.endswith(extension):
                found.append(os.path.join(root, filename))
    logger.debug(f"Discovered {len(found)} replay(s) under {directory}")
    return sorted(found)


def try_compute(replay: Replay) -> None:
    """
    Compute derived statistics, turning any failure into a ReplayComputeError.

    The only place arbitrary exceptions are caught; a failure here ends one
    replay, never the batch.
    """
    try:
        replay.compute()
    except Exception as e:
        raise ReplayComputeError(
            str(replay.path), f"recovered from error computing stats for replay {replay.path}: {e}"
        ) from e


# ============================================================================
# Executor
# ============================================================================


class AnalyzerExecutor:
    """
    Runs analyzer requests over replay files.

    Construction validates everything up front and records problems in
    self.errors; valid requests and paths still run.
    """

    def __init__(
        self,
        replay_paths: Iterable[str],
        analyzer_requests: Iterable[Sequence[str]],
        ctx: Optional[AnalyzerContext] = None,
        output: Optional[Output] = None,
        copy_path: str = "",
        parser: Optional[ReplayParser] = None,
        replay_extension: str = REPLAY_EXTENSION,
    ):
        """
        Initialize the executor.

        Args:
            replay_paths: Replay files to analyze
            analyzer_requests: [name, *args] lists; name may carry filter--/filter-not--
            ctx: Analyzer context, e.g. who the -me player is
            output: Sink for accepted rows (defaults to NoOutput)
            copy_path: Directory to copy accepted replays into; empty disables copying
            parser: Replay decoder (defaults to ScrepParser)
            replay_extension: Suffix a path needs to be considered a replay
        """
        self.ctx = ctx or new_analyzer_context()
        self.output = output or NoOutput()
        self.parser = parser or ScrepParser()
        self.replay_extension = replay_extension
        self.errors: list[Exception] = []

        self.copy_path = copy_path
        self.should_copy = False
        if copy_path:
            self.should_copy = self._check_copy_path(copy_path)

        self.replay_paths, path_errors = filter_replay_paths(replay_paths, replay_extension)
        self.wrappers, wrapper_errors = create_sorted_wrappers(analyzer_requests)
        self.errors.extend(path_errors)
        self.errors.extend(wrapper_errors)

        for error in path_errors:
            logger.warning(str(error))
        logger.debug(
            f"Executor ready: {len(self.replay_paths)} replay(s), "
            f"{len(self.wrappers)} analyzer(s), {len(self.errors)} setup error(s)"
        )

    def _check_copy_path(self, copy_path: str) -> bool:
        try:
            exists = is_file_exist(copy_path)
        except OSError as e:
            error = CopyDirectoryError(copy_path, f"error locating output directory ({e})")
        else:
            if not exists:
                error = CopyDirectoryError(copy_path)
            elif not os.path.isdir(copy_path):
                error = CopyDirectoryError(copy_path, "output path is not a directory")
            else:
                return True
        logger.warning(str(error))
        self.errors.append(error)
        return False

    def execute(self) -> list[Exception]:
        """Run all replays, writing accepted rows to the output. Returns run errors."""
        _, errors = self._execute(save_results=False)
        return errors

    def execute_with_results(self) -> tuple[list[list[str]], list[Exception]]:
        """Like execute(), but also returns the accepted rows in wrapper order."""
        return self._execute(save_results=True)

    @timed
    def _execute(self, save_results: bool) -> tuple[list[list[str]], list[Exception]]:
        rows: list[list[str]] = []
        errors: list[Exception] = []
        accepted = 0

        try:
            self.output.pre(self.wrappers)
        except OutputError as e:
            self._record(errors, e)

        for replay_path in self.replay_paths:
            try:
                replay = self.parse_replay_file(replay_path)
            except ReplayError as e:
                self._record(errors, e)
                continue

            row, replay_errors = self.execute_replay(replay, replay_path, clone_wrappers(self.wrappers))
            errors.extend(replay_errors)
            if not row:
                logger.debug(f"No row for replay {replay_path}")
                continue

            accepted += 1
            try:
                self.output.replay_results(row)
            except OutputError as e:
                self._record(errors, e)
            if save_results:
                rows.append(row)
            if self.should_copy:
                self._copy_replay(replay_path, errors)

        try:
            self.output.post()
        except OutputError as e:
            self._record(errors, e)

        logger.info(
            f"Processed {len(self.replay_paths)} replay(s): "
            f"{accepted} accepted, {len(errors)} error(s)"
        )
        return rows, errors

    def parse_replay_file(self, replay_path: str) -> Replay:
        """
        Decode a replay and compute its derived stats.

        Raises:
            ReplayParseError: The decoder failed
            ReplayComputeError: Computing derived stats failed
        """
        logger.debug(f"Parsing replay {replay_path}")
        replay = self.parser.parse(replay_path)
        try_compute(replay)
        return replay

    def execute_replay(
        self, replay: Replay, replay_path: str, wrappers: list[AnalyzerWrapper]
    ) -> tuple[list[str], list[Exception]]:
        """
        Run both phases over one replay.

        wrappers must be fresh clones; they are mutated.

        Returns:
            (result row in wrapper order, or [] if a filter rejected the replay; errors)
        """
        results = [""] * len(wrappers)
        errors: list[Exception] = []
        removed_count = 0

        # Metadata phase
        for i, wrapper in enumerate(wrappers):
            try:
                done = wrapper.analyzer.start_reading_replay(replay, self.ctx, replay_path)
            except RaszagalError as e:
                self._record(errors, _analyzer_error("beginning to read", replay_path, wrapper, e))
                done, failed = False, True
            else:
                failed = False

            if self._settle(wrapper, i, results, done, failed):
                return [], errors
            if wrapper.removed:
                removed_count += 1

        # Streaming phase
        for command in replay.commands:
            if removed_count == len(wrappers):
                break
            for i, wrapper in enumerate(wrappers):
                if wrapper.removed:
                    continue
                try:
                    done = wrapper.analyzer.process_command(command)
                except RaszagalError as e:
                    self._record(errors, _analyzer_error("reading command on", replay_path, wrapper, e))
                    done, failed = False, True
                else:
                    failed = False

                if self._settle(wrapper, i, results, done, failed):
                    return [], errors
                if wrapper.removed:
                    removed_count += 1

        # Commands ran out: whatever unresolved analyzers hold is final
        for i, wrapper in enumerate(wrappers):
            if wrapper.removed:
                continue
            results[i], _ = wrapper.analyzer.is_done()
            if wrapper.rejects(results[i]):
                return [], errors

        return results, errors

    @staticmethod
    def _settle(
        wrapper: AnalyzerWrapper, i: int, results: list[str], done: bool, failed: bool
    ) -> bool:
        """Record a resolved or failed wrapper. Returns True if the replay is rejected."""
        if not (done or failed):
            return False
        if done:
            results[i], _ = wrapper.analyzer.is_done()
        if wrapper.rejects(results[i]):
            return True
        wrapper.removed = True
        return False

    def _copy_replay(self, replay_path: str, errors: list[Exception]) -> None:
        destination = os.path.join(self.copy_path, os.path.basename(replay_path))
        try:
            copy_file(replay_path, destination)
        except CopyError as e:
            self._record(
                errors, CopyError(f"error copying replay with path {replay_path} to {self.copy_path}: {e}")
            )
        else:
            logger.debug(f"Copied {replay_path} to {destination}")

    @staticmethod
    def _record(errors: list[Exception], error: Exception) -> None:
        logger.warning(str(error))
        errors.append(error)


def _analyzer_error(
    action: str, replay_path: str, wrapper: AnalyzerWrapper, cause: Exception
) -> AnalyzerError:
    error = AnalyzerError(
        f"error {action} replay {replay_path} with analyzer {wrapper.analyzer.name}: {cause}"
    )
    error.__cause__ = cause
    return error
