"""
Utility functions for Raszagal.

This module provides:
- File existence and copy helpers
- CLI argument splitting
- A timing decorator for debug logging
"""

import logging
import os
import shutil
import time
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

from raszagal.errors import CopyError

logger = logging.getLogger(__name__)

# Type variable for generic decorators
F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time at DEBUG level.

    Usage:
        @timed
        def my_function():
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


def is_file_exist(path: str | Path) -> bool:
    """
    Whether path exists.

    Raises:
        OSError: If existence cannot be determined (e.g. permission denied)
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def copy_file(src: str | Path, dst: str | Path) -> None:
    """
    Copy a regular file, replacing dst if present.

    Copying a file onto itself is a no-op.

    Raises:
        CopyError: src or dst is not a regular file, or the copy fails
    """
    src, dst = Path(src), Path(dst)
    try:
        if not src.is_file():
            raise CopyError(f"non-regular source file {src}")
        if dst.exists():
            if not dst.is_file():
                raise CopyError(f"non-regular destination file {dst}")
            if src.samefile(dst):
                return
        shutil.copyfile(src, dst)
    except OSError as e:
        raise CopyError(f"error copying {src} to {dst}: {e}") from e


def unmarshal_arguments(text: str) -> list[str]:
    """Split a comma-separated argument string, trimming and dropping blanks."""
    return [part.strip() for part in text.split(",") if part.strip()]
