"""Error taxonomy shared by the task store, note store and interactive session."""

from __future__ import annotations


class TasknError(Exception):
    """Base class for every failure taskn reports to the user."""


class StoreUnavailable(TasknError):
    """The task store could not be invoked, failed, or returned unparsable output."""

    def __init__(self, message: str, *, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.stderr = stderr


class NoteIOError(TasknError):
    """A note could not be read or written for a reason other than "not found"."""


class InvariantViolation(TasknError):
    """Internal bookkeeping broke a guarantee (selection range, note mapping)."""


class ReminderError(TasknError):
    """The reminder sink rejected or could not run a request."""


class InputClosed(TasknError):
    """An input producer stopped: stdin hit EOF or a read failed."""
