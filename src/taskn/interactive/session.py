"""Session state for the interactive browser and the snapshot loader behind it."""

from __future__ import annotations

from dataclasses import dataclass, field

from taskn import log
from taskn.errors import InvariantViolation
from taskn.notes import NoteStore
from taskn.order import TaskStore, assign_positions, sort_by_estimate
from taskn.taskwarrior import Task


@dataclass
class Snapshot:
    tasks: list[Task] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)


def load_snapshot(store: TaskStore, notes: NoteStore, filters: list[str]) -> Snapshot:
    """Fetch filtered tasks, sort them by estimate, and read every task's note.

    Store failures surface as ``StoreUnavailable``; note read failures other
    than a missing file surface as ``NoteIOError``.
    """
    tasks = sort_by_estimate(store.export(filters))
    contents = notes.read_many([t.uuid for t in tasks])
    log.debug(f"Loaded {len(tasks)} tasks")
    return Snapshot(tasks=tasks, notes=contents)


class Session:
    """Ordered tasks, their notes, and the current selection.

    The selection survives reloads and is clamped to the task count on read,
    so a flush that drops a task never leaves it out of range.
    """

    def __init__(self, store: TaskStore, notes: NoteStore, filters: list[str]) -> None:
        self._store = store
        self._notes = notes
        self._filters = list(filters)
        self.tasks: list[Task] = []
        self.notes: dict[str, str] = {}
        self._selected: int | None = None

    @classmethod
    def load(cls, store: TaskStore, notes: NoteStore, filters: list[str]) -> Session:
        session = cls(store, notes, filters)
        session.reload()
        return session

    def is_empty(self) -> bool:
        return not self.tasks

    # ── selection ────────────────────────────────────────────────

    def selected(self) -> int:
        """Current selection, defaulting to 0 and clamped to the last task."""
        if not self.tasks:
            return 0
        index = self._selected or 0
        if index >= len(self.tasks):
            index = len(self.tasks) - 1
            self._selected = index
        return index

    def select(self, index: int) -> None:
        if self.tasks and not 0 <= index < len(self.tasks):
            raise InvariantViolation(f"selection {index} outside 0..{len(self.tasks) - 1}")
        self._selected = index

    def selected_task(self) -> Task | None:
        if not self.tasks:
            return None
        return self.tasks[self.selected()]

    def selected_contents(self) -> str:
        task = self.selected_task()
        if task is None:
            return ""
        try:
            return self.notes[task.uuid]
        except KeyError:
            raise InvariantViolation(f"no note entry for task {task.uuid}") from None

    # ── mutations used by modes ──────────────────────────────────

    def move_selection(self, delta: int) -> None:
        """Move the selection by *delta*, stopping at either end."""
        if not self.tasks:
            return
        index = self.selected() + delta
        self._selected = max(0, min(index, len(self.tasks) - 1))

    def swap_selected(self, delta: int) -> bool:
        """Swap the selected task with its neighbour at ``selected + delta``.

        The selection follows the task. Returns ``False`` at the boundaries.
        """
        if not self.tasks:
            return False
        index = self.selected()
        other = index + delta
        if not 0 <= other < len(self.tasks):
            return False
        self.tasks[index], self.tasks[other] = self.tasks[other], self.tasks[index]
        self._selected = other
        return True

    def move_selected_to(self, position: int) -> None:
        """Remove the selected task and reinsert it at *position*, selecting it."""
        if not self.tasks:
            return
        if not 0 <= position < len(self.tasks):
            raise InvariantViolation(f"position {position} outside 0..{len(self.tasks) - 1}")
        task = self.tasks.pop(self.selected())
        self.tasks.insert(position, task)
        self._selected = position

    # ── store round trips ────────────────────────────────────────

    def reload(self) -> None:
        """Replace tasks and notes with a fresh snapshot, keeping the selection index."""
        snapshot = load_snapshot(self._store, self._notes, self._filters)
        self.tasks = snapshot.tasks
        self.notes = snapshot.notes

    def flush(self) -> None:
        """Persist every task with its position as estimate, then reload.

        Tasks are saved one by one; the first failure propagates and already
        saved tasks are left as written.
        """
        assign_positions(self.tasks)
        for task in self.tasks:
            self._store.save(task)
        log.debug(f"Flushed {len(self.tasks)} tasks")
        self.reload()
