"""Task ordering: the estimate sort rule and the ``reorder`` command."""

from __future__ import annotations

from typing import Iterable, Protocol

from taskn import log
from taskn.taskwarrior import ESTIMATE_UDA, Task


class TaskStore(Protocol):
    def export(self, filters: Iterable[str] = ()) -> list[Task]: ...

    def save(self, task: Task) -> None: ...

    def ensure_uda(self, name: str, type: str, label: str = "") -> None: ...


def ordering_key(task: Task) -> tuple[bool, float]:
    """Sort key: ascending estimate, tasks without one after all that have one."""
    if task.estimate is None:
        return (True, 0.0)
    return (False, task.estimate)


def sort_by_estimate(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=ordering_key)


def assign_positions(tasks: list[Task]) -> None:
    """Give every task an estimate equal to its 0-based position."""
    for i, task in enumerate(tasks):
        task.estimate = i


def find_task(tasks: list[Task], ref: str) -> int:
    """Index of the task named by working-set id or (prefix of) uuid."""
    ref = ref.strip()
    if ref.isdigit():
        for i, task in enumerate(tasks):
            if task.id == int(ref):
                return i
    matches = [i for i, task in enumerate(tasks) if ref and task.uuid.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ValueError(f"Task reference '{ref}' is ambiguous")
    raise ValueError(f"No pending task matches '{ref}'")


def move_task(tasks: list[Task], ref: str, position: int) -> None:
    """Remove the task named by *ref* and reinsert it at *position*."""
    if not 0 <= position < len(tasks):
        raise ValueError(f"Position {position} is out of range (0..{len(tasks) - 1})")
    index = find_task(tasks, ref)
    tasks.insert(position, tasks.pop(index))


def reorder(
    store: TaskStore,
    filters: list[str],
    ref: str | None = None,
    position: int | None = None,
) -> list[Task]:
    """Renumber the estimates of the filtered tasks, optionally moving one first.

    Returns the tasks in their persisted order.
    """
    store.ensure_uda(ESTIMATE_UDA, "numeric", "Order")
    tasks = sort_by_estimate(store.export(filters))
    if ref is not None and position is not None:
        move_task(tasks, ref, position)

    assign_positions(tasks)
    for task in tasks:
        store.save(task)
    log.debug(f"Assigned estimates 0..{len(tasks) - 1} to {len(tasks)} tasks")
    return tasks
