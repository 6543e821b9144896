"""Shared fixtures for flattask tests."""

import logging
from datetime import datetime, timezone

import pytest

from flattask.models import TaskRecord
from flattask.store import TaskStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep log files and store lookups inside the test's temp directory."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("FLATTASK_STORE", raising=False)
    monkeypatch.delenv("FLATTASK_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FLATTASK_DEBUG", raising=False)
    yield
    # The CLI installs its own handlers; undo that between tests
    logger = logging.getLogger("flattask")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def reference():
    """A fixed 'now' for short date expressions."""
    return datetime(2024, 3, 15, 14, 37, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return TaskStore(tmp_path / "store").ensure()


@pytest.fixture
def sample_task():
    return TaskRecord(
        title="write report",
        authors=("alice", "bob"),
        start=datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc),
        end=datetime(2024, 3, 16, 17, 30, tzinfo=timezone.utc),
        body="Quarterly numbers.\nSend to finance.\n",
    )
