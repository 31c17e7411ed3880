"""Colored console output via Rich.

Results go to stdout; errors and ``--verbose`` debug lines go to stderr so
they never mix with command output.
"""

from __future__ import annotations

import contextlib
from typing import Iterator

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(highlight=False, stderr=True)

_debug_enabled = False


def set_verbose(enabled: bool) -> None:
    global _debug_enabled
    _debug_enabled = enabled


def info(msg: str) -> None:
    console.print(f"[blue]\\[INFO][/blue] {msg}")


def success(msg: str) -> None:
    console.print(f"[green]\\[OK][/green] {msg}")


def warn(msg: str) -> None:
    console.print(f"[yellow]\\[WARN][/yellow] {msg}")


def error(msg: str) -> None:
    err_console.print(f"[red]\\[ERROR][/red] {msg}")


def debug(msg: str) -> None:
    if _debug_enabled:
        err_console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")


@contextlib.contextmanager
def suspended() -> Iterator[None]:
    """Silence debug output while a full-screen view owns the terminal."""
    global _debug_enabled
    saved, _debug_enabled = _debug_enabled, False
    try:
        yield
    finally:
        _debug_enabled = saved
