"""
Output Sinks for Raszagal

Render the result rows of accepted replays. Supported formats:
- CSV (default): header row of display names, one row per replay
- JSON: an array of objects keyed by display name, streamed row by row
- Table: a rich table printed once all replays are processed
- None: swallows everything; used with AnalyzerExecutor.execute_with_results()

Filter and filter-not analyzers only decide which replays are accepted; their
columns are never rendered.
"""

from __future__ import annotations

import csv
import json
import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import IO, TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table

from raszagal.errors import OutputError

if TYPE_CHECKING:
    from raszagal.scheduling import AnalyzerWrapper

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("csv", "json", "table", "none")


class Output(ABC):
    """Receives wrappers once, then one row per accepted replay, then a final call."""

    def __init__(self) -> None:
        self.wrappers: list[AnalyzerWrapper] = []

    @abstractmethod
    def pre(self, wrappers: Sequence[AnalyzerWrapper]) -> None:
        """Runs before the first replay: headers, opening brackets."""

    @abstractmethod
    def replay_results(self, results: Sequence[str]) -> None:
        """Runs for each accepted replay with results in wrapper order."""

    @abstractmethod
    def post(self) -> None:
        """Runs after the last replay: flush, closing brackets."""

    def display_names(self) -> list[str]:
        return [w.display_name for w in self.wrappers if not w.is_any_filter]

    def visible_results(self, results: Sequence[str]) -> list[str]:
        return [r for w, r in zip(self.wrappers, results) if not w.is_any_filter]


class NoOutput(Output):
    """Swallows output."""

    def pre(self, wrappers: Sequence[AnalyzerWrapper]) -> None:
        self.wrappers = list(wrappers)

    def replay_results(self, results: Sequence[str]) -> None:
        pass

    def post(self) -> None:
        pass


class CSVOutput(Output):
    """CSV with a header row."""

    def __init__(self, stream: IO[str]) -> None:
        super().__init__()
        self.stream = stream
        self._writer = csv.writer(stream)

    def pre(self, wrappers: Sequence[AnalyzerWrapper]) -> None:
        self.wrappers = list(wrappers)
        self._write(self.display_names())

    def replay_results(self, results: Sequence[str]) -> None:
        self._write(self.visible_results(results))

    def post(self) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise OutputError(f"error flushing CSV output: {e}") from e

    def _write(self, row: list[str]) -> None:
        try:
            self._writer.writerow(row)
        except (OSError, csv.Error) as e:
            raise OutputError(f"error writing CSV row: {e}") from e


class JSONOutput(Output):
    """
    JSON array of objects.

    Written incrementally so memory stays at one row regardless of how many
    replays are processed.
    """

    def __init__(self, stream: IO[str]) -> None:
        super().__init__()
        self.stream = stream
        self._first_row = True

    def pre(self, wrappers: Sequence[AnalyzerWrapper]) -> None:
        self.wrappers = list(wrappers)
        self._first_row = True
        self._write("[\n")

    def replay_results(self, results: Sequence[str]) -> None:
        row = dict(zip(self.display_names(), self.visible_results(results)))
        if not self._first_row:
            self._write(",\n")
        self._write(json.dumps(row))
        self._first_row = False

    def post(self) -> None:
        self._write("\n]\n")
        try:
            self.stream.flush()
        except OSError as e:
            raise OutputError(f"error flushing JSON output: {e}") from e

    def _write(self, text: str) -> None:
        try:
            self.stream.write(text)
        except OSError as e:
            raise OutputError(f"error writing JSON output: {e}") from e


class TableOutput(Output):
    """Buffers rows and prints them as a rich table at the end."""

    def __init__(self, console: Optional[Console] = None, title: str = "Replay Results") -> None:
        super().__init__()
        self.console = console or Console()
        self.title = title
        self.rows: list[list[str]] = []

    def pre(self, wrappers: Sequence[AnalyzerWrapper]) -> None:
        self.wrappers = list(wrappers)
        self.rows = []

    def replay_results(self, results: Sequence[str]) -> None:
        self.rows.append(self.visible_results(results))

    def post(self) -> None:
        table = Table(title=self.title, caption=f"{len(self.rows)} replay(s)")
        for i, name in enumerate(self.display_names()):
            table.add_column(name, style="cyan" if i == 0 else None)
        for row in self.rows:
            table.add_row(*row)
        self.console.print(table)


def make_output(fmt: str, stream: Optional[IO[str]] = None) -> Output:
    """
    Create an output sink by format name.

    Args:
        fmt: One of csv, json, table, none
        stream: Destination for csv/json (defaults to stdout)

    Raises:
        ValueError: Unknown format
    """
    fmt = fmt.lower()
    stream = stream or sys.stdout
    if fmt == "csv":
        return CSVOutput(stream)
    if fmt == "json":
        return JSONOutput(stream)
    if fmt == "table":
        return TableOutput(Console(file=stream))
    if fmt == "none":
        return NoOutput()
    raise ValueError(f"Unknown output format: {fmt} (expected one of {', '.join(OUTPUT_FORMATS)})")
