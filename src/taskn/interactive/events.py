"""Input events: keyboard and terminal-resize producers merged into one queue."""

from __future__ import annotations

import codecs
import os
import queue
import select
import signal
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from taskn import log
from taskn.errors import InputClosed, TasknError

# Named keys; printable characters are delivered as themselves.
UP = "<up>"
DOWN = "<down>"
ENTER = "<enter>"
ESC = "<esc>"
CTRL_C = "<ctrl-c>"

# How long a trailing ESC waits for the rest of an escape sequence (seconds).
ESCAPE_DELAY = 0.05

_ESCAPE_SEQUENCES: dict[str, str] = {
    "\x1b[A": UP,
    "\x1b[B": DOWN,
    "\x1bOA": UP,
    "\x1bOB": DOWN,
}

_CONTROL_KEYS: dict[str, str] = {
    "\r": ENTER,
    "\n": ENTER,
    "\x03": CTRL_C,
}


class EventKind(str, Enum):
    KEY = "key"
    RESIZE = "resize"
    FAILED = "failed"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    key: str = ""
    error: Exception | None = None

    @classmethod
    def key_press(cls, key: str) -> Event:
        return cls(EventKind.KEY, key=key)

    @classmethod
    def resize(cls) -> Event:
        return cls(EventKind.RESIZE)


Push = Callable[[Event], None]
Producer = Callable[[Push], None]


class KeyDecoder:
    """Incremental terminal input decoder.

    An escape sequence cut off at the end of one chunk is held back and
    completed by the next :meth:`feed`. :meth:`flush` gives up on it: a held
    lone ESC becomes the Escape key, a partial sequence is dropped.
    Sequences other than the up/down arrows are dropped as well.
    """

    def __init__(self) -> None:
        self.pending = ""

    def feed(self, text: str) -> list[str]:
        text, self.pending = self.pending + text, ""
        keys: list[str] = []
        i = 0
        while i < len(text):
            ch = text[i]
            if ch != "\x1b":
                keys.append(_CONTROL_KEYS.get(ch, ch))
                i += 1
                continue

            if i + 1 == len(text):
                self.pending = text[i:]
                break
            intro = text[i + 1]
            if intro == "[":
                end = i + 2
                while end < len(text) and not "\x40" <= text[end] <= "\x7e":
                    end += 1
                if end == len(text):
                    self.pending = text[i:]
                    break
                end += 1
            elif intro == "O":
                if i + 2 == len(text):
                    self.pending = text[i:]
                    break
                end = i + 3
            else:
                keys.append(ESC)
                i += 1
                continue

            key = _ESCAPE_SEQUENCES.get(text[i:end])
            if key is not None:
                keys.append(key)
            i = end
        return keys

    def flush(self) -> list[str]:
        pending, self.pending = self.pending, ""
        return [ESC] if pending == "\x1b" else []


def decode_keys(text: str) -> list[str]:
    """Decode one complete chunk of terminal input into key names."""
    decoder = KeyDecoder()
    return decoder.feed(text) + decoder.flush()


def _readable(fd: int, timeout: float) -> bool:
    ready, _, _ = select.select([fd], [], [], timeout)
    return bool(ready)


def read_keys(push: Push, fd: int | None = None) -> None:
    """Blocking keyboard producer; returns only by raising."""
    if fd is None:
        fd = sys.stdin.fileno()
    text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    keys = KeyDecoder()
    while True:
        if keys.pending and not _readable(fd, ESCAPE_DELAY):
            decoded = keys.flush()
        else:
            data = os.read(fd, 64)
            if not data:
                raise InputClosed("stdin was closed")
            decoded = keys.feed(text_decoder.decode(data))
        for key in decoded:
            push(Event.key_press(key))


def watch_resize(push: Push) -> None:
    """Blocking SIGWINCH producer. The signal must be blocked in every thread."""
    while True:
        signum = signal.sigwait({signal.SIGWINCH})
        if signum == signal.SIGWINCH:
            push(Event.resize())


class EventSource:
    """Many producers, one consumer.

    Usage::

        events = EventSource().start()
        while True:
            event = events.next()   # blocks; producer failures re-raise here
    """

    def __init__(self, producers: Iterable[Producer] | None = None) -> None:
        self._queue: queue.Queue[Event] = queue.Queue()
        if producers is None:
            producers = (read_keys, watch_resize)
        self._producers = list(producers)
        self._threads: list[threading.Thread] = []

    def start(self) -> EventSource:
        if watch_resize in self._producers:
            # Threads inherit the mask, so only the resize thread's sigwait sees it.
            signal.pthread_sigmask(signal.SIG_BLOCK, {signal.SIGWINCH})
        for producer in self._producers:
            name = getattr(producer, "__name__", "producer")
            t = threading.Thread(target=self._run, args=(producer,), name=f"taskn-{name}", daemon=True)
            t.start()
            self._threads.append(t)
        return self

    def _run(self, producer: Producer) -> None:
        try:
            producer(self._queue.put)
        except Exception as exc:
            self._queue.put(Event(EventKind.FAILED, error=exc))

    def next(self) -> Event:
        event = self._queue.get()
        if event.kind is EventKind.FAILED:
            log.debug(f"Input producer failed: {event.error!r}")
            if isinstance(event.error, TasknError):
                raise event.error
            raise InputClosed(f"Input failed: {event.error}") from event.error
        return event
