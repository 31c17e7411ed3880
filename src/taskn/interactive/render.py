"""Rich layout for the interactive browser and the terminal it is drawn on."""

from __future__ import annotations

import contextlib
import sys
import termios
import tty
from typing import Iterator

from rich.console import Console, ConsoleOptions, Group, RenderableType, RenderResult
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from taskn.errors import InvariantViolation
from taskn.interactive.modes import Browse, ConfirmComplete, Mode, Reorder, hint
from taskn.interactive.session import Session

LIST_RATIO = 3
PREVIEW_RATIO = 7


def row_style(mode: Mode, index: int, selected: int) -> str:
    is_selected = index == selected
    match mode:
        case Browse():
            return "" if is_selected else "dim"
        case Reorder():
            return "bold underline" if is_selected else "dim"
        case ConfirmComplete():
            return "strike dim" if is_selected else ""
    raise InvariantViolation(f"unknown mode {mode!r}")


class TaskRows:
    """Task lines, scrolled so the selected row stays in view."""

    def __init__(self, lines: list[Text], selected: int) -> None:
        self.lines = lines
        self.selected = selected

    def window(self, height: int) -> list[Text]:
        start = max(0, self.selected - height + 1)
        return self.lines[start:start + height]

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        height = options.height or len(self.lines)
        for line in self.window(max(height, 1)):
            line.no_wrap = True
            line.overflow = "ellipsis"
            yield line


def task_list(mode: Mode, session: Session) -> Panel:
    body: RenderableType
    if session.is_empty():
        body = Text("No pending tasks", style="dim italic")
    else:
        selected = session.selected()
        lines = [
            Text(("> " if i == selected else "  ") + task.description, style=row_style(mode, i, selected))
            for i, task in enumerate(session.tasks)
        ]
        body = TaskRows(lines, selected)
    return Panel(
        body,
        title="Tasks",
        title_align="left",
        subtitle=Text(hint(mode), style="dim"),
        subtitle_align="left",
    )


def preview(session: Session) -> Panel:
    return Panel(Text(session.selected_contents()), title="Preview", title_align="left")


def confirmation(session: Session) -> Panel:
    task = session.selected_task()
    description = task.description if task is not None else ""
    body = Group(
        Text("Mark this task as done?", style="bold"),
        Text(""),
        Text(description, style="strike"),
        Text(""),
        Text("enter/y confirm   esc/n cancel", style="dim"),
    )
    return Panel(body, title="Complete", title_align="left", border_style="yellow")


def render(mode: Mode, session: Session) -> Layout:
    """Two panes: the task list and, beside it, a preview or a confirm prompt."""
    match mode:
        case ConfirmComplete():
            side = confirmation(session)
        case _:
            side = preview(session)

    layout = Layout(name="root")
    layout.split_row(
        Layout(task_list(mode, session), name="tasks", ratio=LIST_RATIO),
        Layout(side, name="side", ratio=PREVIEW_RATIO),
    )
    return layout


@contextlib.contextmanager
def cbreak(fd: int) -> Iterator[None]:
    """Unbuffered, unechoed input on *fd*; settings are restored on exit."""
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class Renderer:
    """Owns the alternate screen while the session runs.

    Usage::

        with Renderer() as renderer:
            renderer.draw(render(mode, session))
    """

    def __init__(self, console: Console | None = None, input_fd: int | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self._stack: contextlib.ExitStack | None = None
        self._screen = None

    def __enter__(self) -> Renderer:
        stack = contextlib.ExitStack()
        try:
            stack.enter_context(cbreak(self.input_fd))
            self._screen = stack.enter_context(self.console.screen(hide_cursor=True))
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._stack is not None:
            self._stack.close()
        self._stack = None
        self._screen = None

    def draw(self, renderable: RenderableType) -> None:
        if self._screen is None:
            raise InvariantViolation("Renderer.draw called outside its context")
        self._screen.update(renderable)
