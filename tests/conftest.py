"""Shared fixtures: in-memory replays, analyzer context and replay files on disk."""

import logging

import pytest

from factories import ME, build_replay
from raszagal.analyzers import new_analyzer_context
from raszagal.core.config import reset_config


@pytest.fixture
def zvp_replay():
    return build_replay()


@pytest.fixture
def ctx():
    return new_analyzer_context([ME])


@pytest.fixture
def replay_files(tmp_path):
    """Factory creating small replay files on disk; returns their paths as strings."""

    def _create(*names, directory=None):
        directory = directory or tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        paths = []
        for name in names:
            path = directory / name
            path.write_bytes(b"replay:" + name.encode())
            paths.append(str(path))
        return paths

    return _create


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep RASZAGAL_* variables and cached config from leaking between tests."""
    for var in (
        "RASZAGAL_SCREP_PATH",
        "RASZAGAL_TIMEOUT_SECONDS",
        "RASZAGAL_REPLAY_EXTENSION",
        "RASZAGAL_ME",
        "RASZAGAL_COPY_TO",
        "RASZAGAL_EXPORT_FORMAT",
        "RASZAGAL_LOG_LEVEL",
        "RASZAGAL_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
