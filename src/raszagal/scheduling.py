"""
Analyzer wrappers and their ordering.

A wrapper binds one cloned analyzer to the request that created it: its
arguments, whether it acts as a filter, and its column name. Wrappers are
built and sorted once per run; every replay then works on fresh clones in the
same order, so result columns are stable across replays.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from raszagal.analyzers import Analyzer, get_analyzer
from raszagal.errors import InvalidArgumentError, RaszagalError

logger = logging.getLogger(__name__)

FILTER_PREFIX = "filter--"
FILTER_NOT_PREFIX = "filter-not--"


@dataclass
class AnalyzerWrapper:
    """An argument-bound analyzer plus its scheduling metadata."""

    analyzer: Analyzer
    is_filter: bool = False
    is_filter_not: bool = False
    # Column name: "name" or "name(arg1,arg2)"
    display_name: str = ""
    # Unique per run: "name_<request index>"
    name: str = ""
    # Position after sorting, for diagnostics
    pos: int = 0
    # Resolved or errored on the current replay; gets no more calls
    removed: bool = False

    @property
    def is_any_filter(self) -> bool:
        return self.is_filter or self.is_filter_not

    def sort_key(self) -> tuple[int, str]:
        """Filters first, then by analyzer name."""
        return (0 if self.is_any_filter else 1, self.analyzer.name)

    def rejects(self, result: str) -> bool:
        """Whether a final result excludes the replay from output."""
        return (self.is_filter and result != "true") or (self.is_filter_not and result == "true")

    def clone(self) -> AnalyzerWrapper:
        return AnalyzerWrapper(
            analyzer=self.analyzer.clone(),
            is_filter=self.is_filter,
            is_filter_not=self.is_filter_not,
            display_name=self.display_name,
            name=self.name,
            pos=self.pos,
            removed=False,
        )


def split_filter_prefix(name: str) -> tuple[str, bool, bool]:
    """Strip a filter--/filter-not-- prefix. Returns (name, is_filter, is_filter_not)."""
    if name.startswith(FILTER_PREFIX):
        return name[len(FILTER_PREFIX) :], True, False
    if name.startswith(FILTER_NOT_PREFIX):
        return name[len(FILTER_NOT_PREFIX) :], False, True
    return name, False, False


def display_name_for(name: str, args: Sequence[str]) -> str:
    if not args:
        return name
    return f"{name}({','.join(args)})"


def build_wrapper(request: Sequence[str], index: int) -> AnalyzerWrapper:
    """
    Build one wrapper from a [name, *args] request.

    Raises:
        UnknownAnalyzerError: No analyzer has that name
        InvalidArgumentError: Bad arguments, or a filter on a non-boolean analyzer
    """
    name, is_filter, is_filter_not = split_filter_prefix(request[0])
    args = list(request[1:])

    analyzer = get_analyzer(name).clone()
    if (is_filter or is_filter_not) and not analyzer.is_boolean_result:
        raise InvalidArgumentError(
            f"analyzer {name} does not produce a true/false result and cannot be used as a filter",
            analyzer_name=name,
        )
    analyzer.set_arguments(args)

    return AnalyzerWrapper(
        analyzer=analyzer,
        is_filter=is_filter,
        is_filter_not=is_filter_not,
        display_name=display_name_for(analyzer.name, args),
        name=f"{analyzer.name}_{index}",
    )


def create_sorted_wrappers(
    requests: Iterable[Sequence[str]],
) -> tuple[list[AnalyzerWrapper], list[Exception]]:
    """
    Build wrappers for all valid requests, sorted filters first then by name.

    Invalid requests are skipped and reported; they never abort the others.
    Empty requests are ignored.

    Returns:
        (sorted wrappers, setup errors)
    """
    wrappers: list[AnalyzerWrapper] = []
    errors: list[Exception] = []

    for index, request in enumerate(requests):
        if not request:
            continue
        try:
            wrappers.append(build_wrapper(request, index))
        except RaszagalError as e:
            logger.warning(f"Ignoring analyzer request {list(request)}: {e}")
            errors.append(e)

    # sorted() is stable, so equal keys keep request order
    wrappers = sorted(wrappers, key=AnalyzerWrapper.sort_key)
    for pos, wrapper in enumerate(wrappers):
        wrapper.pos = pos

    return wrappers, errors


def clone_wrappers(wrappers: Iterable[AnalyzerWrapper]) -> list[AnalyzerWrapper]:
    """Fresh per-replay copies, same order."""
    return [w.clone() for w in wrappers]
