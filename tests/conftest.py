"""Shared fixtures for taskn tests.

File handling in tests:
- Use tmp_path for note directories so tests are isolated and cleaned up.
- Use FakeTaskStore instead of a real Taskwarrior install.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from taskn.interactive.session import Session
from taskn.notes import NoteStore
from taskn.taskwarrior import STATUS_PENDING, Task
from fakes import FakeTaskStore


def _make_task(
    uuid: str,
    description: str = "",
    estimate: float | None = None,
    status: str = STATUS_PENDING,
    tags: set[str] | None = None,
    wait: datetime | None = None,
    id: int = 0,
) -> Task:
    return Task(
        uuid=uuid,
        description=description or f"Task {uuid}",
        id=id,
        status=status,
        estimate=estimate,
        tags=tags or set(),
        wait=wait,
    )


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def note_store(tmp_path: Path) -> NoteStore:
    return NoteStore(tmp_path / "notes", "md")


@pytest.fixture
def abc_store() -> FakeTaskStore:
    """Three pending tasks A, B, C with estimates 0, 1, 2."""
    return FakeTaskStore([
        _make_task("A", estimate=0),
        _make_task("B", estimate=1),
        _make_task("C", estimate=2),
    ])


@pytest.fixture
def make_session(note_store: NoteStore):
    """Load a Session from a store using the shared note store."""

    def _load(store: FakeTaskStore, filters: list[str] | None = None) -> Session:
        return Session.load(store, note_store, filters or ["status:pending"])

    return _load
