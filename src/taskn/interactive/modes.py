"""Interactive modes and their key handling.

Each mode is an immutable value; :func:`update` interprets one key against
the session and returns an :class:`Action` naming the next mode and whether
the session must be reloaded or flushed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from taskn.errors import InvariantViolation
from taskn.interactive.events import DOWN, ENTER, ESC, UP
from taskn.interactive.session import Session

UP_KEYS = frozenset({UP, "k"})
DOWN_KEYS = frozenset({DOWN, "j"})


@dataclass(frozen=True)
class Browse:
    pass


@dataclass(frozen=True)
class Reorder:
    original_pos: int


@dataclass(frozen=True)
class ConfirmComplete:
    pass


Mode = Union[Browse, Reorder, ConfirmComplete]


@dataclass(frozen=True)
class Action:
    mode: Mode | None = None
    reload: bool = False
    flush: bool = False


NOTHING = Action()


def update(mode: Mode, key: str, session: Session) -> Action:
    match mode:
        case Browse():
            return _update_browse(key, session)
        case Reorder(original_pos=original_pos):
            return _update_reorder(original_pos, key, session)
        case ConfirmComplete():
            return _update_confirm(key, session)
    raise InvariantViolation(f"unknown mode {mode!r}")


def hint(mode: Mode) -> str:
    """One-line key legend for the status bar."""
    match mode:
        case Browse():
            return "↑/↓ move  s reorder  d done  ^C quit"
        case Reorder():
            return "REORDER  ↑/↓ move task  enter/s save  esc cancel"
        case ConfirmComplete():
            return "DONE?  enter/y confirm  esc/n cancel"
    raise InvariantViolation(f"unknown mode {mode!r}")


def _update_browse(key: str, session: Session) -> Action:
    if key in UP_KEYS:
        session.move_selection(-1)
    elif key in DOWN_KEYS:
        session.move_selection(1)
    elif session.is_empty():
        pass
    elif key == "s":
        return Action(mode=Reorder(original_pos=session.selected()))
    elif key == "d":
        return Action(mode=ConfirmComplete())
    return NOTHING


def _update_reorder(original_pos: int, key: str, session: Session) -> Action:
    if key in UP_KEYS:
        session.swap_selected(-1)
    elif key in DOWN_KEYS:
        session.swap_selected(1)
    elif key in (ENTER, "s"):
        return Action(mode=Browse(), flush=True)
    elif key in (ESC, "q"):
        # Nothing was persisted while reordering, so reverting is in-memory only.
        session.move_selected_to(original_pos)
        return Action(mode=Browse())
    return NOTHING


def _update_confirm(key: str, session: Session) -> Action:
    if key in (ENTER, "y"):
        task = session.selected_task()
        if task is None:
            return Action(mode=Browse())
        task.mark_done()
        return Action(mode=Browse(), flush=True)
    if key in (ESC, "n", "q"):
        return Action(mode=Browse())
    return NOTHING
