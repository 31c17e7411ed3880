"""Interactive task browser: event loop tying events, modes, session and screen."""

from __future__ import annotations

from typing import Callable, Protocol

from rich.console import RenderableType

from taskn import log
from taskn.config import Config
from taskn.interactive.events import CTRL_C, Event, EventKind, EventSource
from taskn.interactive.modes import Action, Browse, Mode, update
from taskn.interactive.render import Renderer, render
from taskn.interactive.session import Session
from taskn.notes import NoteStore
from taskn.order import TaskStore
from taskn.taskwarrior import ESTIMATE_UDA, TaskWarrior


class Events(Protocol):
    def next(self) -> Event: ...


def apply(action: Action, mode: Mode, session: Session) -> Mode:
    """Carry out an action's directives and return the mode to continue in."""
    if action.flush:
        session.flush()
    elif action.reload:
        session.reload()
    return action.mode if action.mode is not None else mode


def loop(
    session: Session,
    events: Events,
    draw: Callable[[RenderableType], None],
    mode: Mode | None = None,
) -> Mode:
    """Render, wait for an event, dispatch it; until Ctrl-C. Returns the final mode."""
    mode = mode if mode is not None else Browse()
    while True:
        draw(render(mode, session))
        event = events.next()
        if event.kind is EventKind.RESIZE:
            continue
        if event.key == CTRL_C:
            return mode
        action = update(mode, event.key, session)
        if action.mode is not None and action.mode != mode:
            log.debug(f"{type(mode).__name__} -> {type(action.mode).__name__}")
        mode = apply(action, mode, session)


def run(
    cfg: Config,
    *,
    store: TaskStore | None = None,
    notes: NoteStore | None = None,
) -> None:
    """Load pending tasks and run the browser until the user quits.

    Store and note failures propagate; the screen is restored first.
    """
    store = store or TaskWarrior(cfg.task_bin)
    notes = notes or NoteStore(cfg.notes_dir, cfg.file_format)

    store.ensure_uda(ESTIMATE_UDA, "numeric", "Order")
    session = Session.load(store, notes, cfg.pending_filter())

    with log.suspended(), Renderer() as renderer:
        events = EventSource().start()
        try:
            loop(session, events, renderer.draw)
        except KeyboardInterrupt:
            pass
