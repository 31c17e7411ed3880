"""taskn CLI.

Installed as ``taskn`` console_script via pipx / pip.
"""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from taskn import __version__
from taskn.config import DEFAULT_FILE_FORMAT, Config
from taskn.errors import TasknError


# ── Custom Click group that handles command aliases ──────────────────

class TasknGroup(click.Group):
    """Resolve ``order`` to ``reorder`` and default to ``interactive``."""

    _ALIASES: dict[str, str] = {
        "order": "reorder",
        "i": "interactive",
    }

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self._ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        # Unknown first words are filters for the default command.
        if args and super().get_command(ctx, self._ALIASES.get(args[0], args[0])) is None:
            args = ["interactive", *args]
        cmd_name, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else cmd_name), cmd, rest


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
PASSTHROUGH_SETTINGS = dict(ignore_unknown_options=True, allow_interspersed_args=False)


def _config(ctx: click.Context, args: tuple[str, ...] = ()) -> Config:
    cfg: Config = ctx.obj
    cfg.args = list(args)
    return cfg


def _stdin_is_tty() -> bool:
    return sys.stdin.isatty()


def _fail(exc: TasknError) -> NoReturn:
    from taskn import log

    log.error(str(exc))
    sys.exit(1)


@click.group(
    cls=TasknGroup,
    invoke_without_command=True,
    context_settings=CONTEXT_SETTINGS,
)
@click.option("--editor", default="", help="Editor for notes (default: $EDITOR, then vi)")
@click.option("--file-format", default=DEFAULT_FILE_FORMAT, show_default=True, help="Note file extension")
@click.option("--root-dir", default="", help="Note directory (default: $TASKN_ROOT_DIR or ~/.taskn)")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="taskn")
@click.pass_context
def main(
    ctx: click.Context,
    editor: str,
    file_format: str,
    root_dir: str,
    verbose: bool,
) -> None:
    """taskn: notes, ordering and an interactive browser for Taskwarrior.

    Extra arguments after a command are passed to Taskwarrior as a filter.

    \b
    EXAMPLES:
      taskn                           # Browse pending tasks
      taskn interactive project:home  # Browse a filtered set
      taskn reorder                   # Renumber estimates 0..n-1
      taskn reorder 12 0              # Move task 12 to the top
      taskn remind                    # Sync +remindme tasks to Reminders
    """
    from taskn import log

    log.set_verbose(verbose)
    ctx.obj = Config(
        editor=editor,
        file_format=file_format,
        root_dir=root_dir,
        verbose=verbose,
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(interactive)


# ── Subcommand: interactive ──────────────────────────────────────


@main.command(context_settings=PASSTHROUGH_SETTINGS)
@click.argument("filters", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def interactive(ctx: click.Context, filters: tuple[str, ...] = ()) -> None:
    """Browse, reorder and complete pending tasks.

    \b
    KEYS:
      up/down, k/j   move selection
      s              reorder the selected task (enter/s save, esc cancel)
      d              mark the selected task done (enter/y confirm, esc cancel)
      ctrl-c         quit
    """
    from taskn import interactive as session_ui

    if not _stdin_is_tty():
        raise click.UsageError("interactive mode needs a terminal on stdin")

    try:
        session_ui.run(_config(ctx, filters))
    except TasknError as exc:
        _fail(exc)


# ── Subcommand: reorder ──────────────────────────────────────────


@main.command()
@click.argument("task_ref", required=False)
@click.argument("position", required=False, type=click.IntRange(min=0))
@click.pass_context
def reorder(ctx: click.Context, task_ref: str | None, position: int | None) -> None:
    """Assign estimates 0..n-1 to pending tasks, optionally moving one first.

    TASK_REF is a task id or uuid prefix; POSITION is its 0-based target slot.
    """
    from taskn import log
    from taskn.order import reorder as do_reorder
    from taskn.taskwarrior import TaskWarrior

    if (task_ref is None) != (position is None):
        raise click.UsageError("Give both TASK_REF and POSITION, or neither.")

    cfg = _config(ctx)
    try:
        tasks = do_reorder(TaskWarrior(cfg.task_bin), cfg.pending_filter(), task_ref, position)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TASK_REF/POSITION") from exc
    except TasknError as exc:
        _fail(exc)

    if not tasks:
        log.warn("No pending tasks to order")
        return
    log.success(f"Ordered {len(tasks)} tasks")


# ── Subcommand: remind ───────────────────────────────────────────


@main.command(context_settings=PASSTHROUGH_SETTINGS)
@click.argument("filters", nargs=-1, type=click.UNPROCESSED)
@click.option("--list", "list_name", default="", help="Reminders list to create new reminders in")
@click.pass_context
def remind(ctx: click.Context, filters: tuple[str, ...], list_name: str) -> None:
    """Sync +remindme tasks into macOS Reminders."""
    from taskn import log
    from taskn.remind import AppleReminders, remind as do_remind
    from taskn.taskwarrior import TaskWarrior

    cfg = _config(ctx, filters)
    try:
        tasks = do_remind(TaskWarrior(cfg.task_bin), AppleReminders(list_name), cfg.args)
    except TasknError as exc:
        _fail(exc)

    log.success(f"Synced {len(tasks)} reminders")
