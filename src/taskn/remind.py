"""Sync ``+remindme`` tasks into a reminders app."""

from __future__ import annotations

import subprocess
import sys
from datetime import datetime
from typing import Protocol

from taskn import log
from taskn.errors import ReminderError
from taskn.order import TaskStore
from taskn.taskwarrior import ESTIMATE_UDA, REMINDER_UDA, Task

REMIND_TAG = "remindme"
REMIND_FILTER = ["+remindme", "(status:pending or status:waiting)"]


class ReminderSink(Protocol):
    def lookup(self, reminder_id: str) -> bool: ...

    def create(self, title: str, body: str, due: datetime | None) -> str: ...

    def update(self, reminder_id: str, title: str, due: datetime | None) -> None: ...


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _date_lines(var: str, due: datetime) -> list[str]:
    # Built field by field; AppleScript date literals depend on the system locale.
    due = due.astimezone() if due.tzinfo else due
    return [
        f"set {var} to current date",
        f"set day of {var} to 1",
        f"set year of {var} to {due.year}",
        f"set month of {var} to {due.month}",
        f"set day of {var} to {due.day}",
        f"set time of {var} to {due.hour * 3600 + due.minute * 60 + due.second}",
    ]


class AppleReminders:
    """macOS Reminders.app driven through ``osascript``."""

    def __init__(self, list_name: str = "") -> None:
        self.list_name = list_name

    def _osascript(self, lines: list[str]) -> str:
        if sys.platform != "darwin":
            raise ReminderError("Reminders sync is only available on macOS")
        script = "\n".join(['tell application "Reminders"', *lines, "end tell"])
        log.debug(f"osascript:\n{script}")
        try:
            r = subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ReminderError(f"osascript could not be run: {exc}") from exc
        if r.returncode != 0:
            detail = (r.stderr or "").strip() or f"exit code {r.returncode}"
            raise ReminderError(f"Reminders request failed: {detail}")
        return r.stdout.strip()

    def _container(self) -> str:
        if self.list_name:
            return f" at end of list {_quote(self.list_name)}"
        return ""

    def lookup(self, reminder_id: str) -> bool:
        out = self._osascript([f"return exists reminder id {_quote(reminder_id)}"])
        return out == "true"

    def create(self, title: str, body: str, due: datetime | None) -> str:
        lines: list[str] = []
        props = f"name:{_quote(title)}, body:{_quote(body)}"
        if due is not None:
            lines += _date_lines("dueDate", due)
            props += ", remind me date:dueDate"
        lines.append(f"set r to make new reminder{self._container()} with properties {{{props}}}")
        lines.append("return id of r")
        return self._osascript(lines)

    def update(self, reminder_id: str, title: str, due: datetime | None) -> None:
        lines = [
            f"set r to reminder id {_quote(reminder_id)}",
            f"set name of r to {_quote(title)}",
        ]
        if due is not None:
            lines += _date_lines("dueDate", due)
            lines.append("set remind me date of r to dueDate")
        self._osascript(lines)


def sync_task(task: Task, sink: ReminderSink) -> bool:
    """Create or refresh the reminder for *task*. Returns True if one was created."""
    if task.reminder_uuid and sink.lookup(task.reminder_uuid):
        sink.update(task.reminder_uuid, task.description, task.wait)
        return False
    task.reminder_uuid = sink.create(task.description, task.uuid, task.wait)
    return True


def remind(store: TaskStore, sink: ReminderSink, filters: list[str]) -> list[Task]:
    """Mirror every filtered ``+remindme`` task into *sink*.

    New reminder ids are written back onto the task so later runs update
    rather than duplicate. Returns the synced tasks.
    """
    # Saving writes every tracked field, estimate included.
    store.ensure_uda(ESTIMATE_UDA, "numeric", "Order")
    store.ensure_uda(REMINDER_UDA, "string", "Reminder")
    tasks = [t for t in store.export([*filters, *REMIND_FILTER]) if t.has_tag(REMIND_TAG)]

    created = 0
    for task in tasks:
        if sync_task(task, sink):
            store.save(task)
            log.info(f"Reminder created for {task.description!r}")
            created += 1
    log.debug(f"Reminders: {created} created, {len(tasks) - created} updated")
    return tasks
