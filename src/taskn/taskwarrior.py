"""Taskwarrior adapter: task records, JSON export parsing, and modify calls."""

from __future__ import annotations

import json
import shlex
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

from taskn import log
from taskn.errors import StoreUnavailable

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"

# Applied to every invocation so Taskwarrior never prompts or prints chatter.
RC_OVERRIDES: tuple[str, ...] = ("rc.confirmation=off", "rc.verbose=nothing")

ESTIMATE_UDA = "estimate"
REMINDER_UDA = "taskn_reminder_uuid"

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"


def parse_timestamp(raw: str) -> datetime:
    """Parse Taskwarrior's ``YYYYMMDDThhmmssZ`` (UTC) into a local-time datetime."""
    naive = datetime.strptime(raw, TIMESTAMP_FORMAT)
    return naive.replace(tzinfo=timezone.utc).astimezone()


def format_timestamp(value: datetime | None) -> str:
    """Inverse of :func:`parse_timestamp`; ``None`` formats as an empty string."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class Task:
    uuid: str
    description: str = ""
    id: int = 0
    status: str = STATUS_PENDING
    estimate: float | None = None
    tags: set[str] = field(default_factory=set)
    wait: datetime | None = None
    reminder_uuid: str = ""

    @classmethod
    def from_export(cls, raw: dict[str, Any]) -> Task:
        """Build a Task from one object of ``task export`` output.

        Raises ``ValueError``/``KeyError``/``TypeError`` on malformed records;
        callers translate those into :class:`StoreUnavailable`.
        """
        estimate = raw.get(ESTIMATE_UDA)
        wait = raw.get("wait")
        return cls(
            uuid=str(raw["uuid"]),
            description=str(raw.get("description", "")),
            id=int(raw.get("id") or 0),
            status=str(raw.get("status", STATUS_PENDING)),
            estimate=None if estimate in (None, "") else float(estimate),
            tags=set(raw.get("tags") or []),
            wait=parse_timestamp(wait) if wait else None,
            reminder_uuid=str(raw.get(REMINDER_UDA) or ""),
        )

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def mark_done(self) -> None:
        self.status = STATUS_COMPLETED

    def modify_args(self) -> list[str]:
        """Field assignments that overwrite this task's full record.

        An empty value after the colon clears the field in Taskwarrior.
        """
        args = [
            f"description:{self.description}",
            f"status:{self.status}",
            f"{ESTIMATE_UDA}:{_format_number(self.estimate)}",
            f"wait:{format_timestamp(self.wait)}",
        ]
        # Only written once the remind command has defined the UDA.
        if self.reminder_uuid:
            args.append(f"{REMINDER_UDA}:{self.reminder_uuid}")
        return args


def parse_export(output: str) -> list[Task]:
    """Parse the JSON array printed by ``task export``."""
    try:
        records = json.loads(output or "[]")
        if not isinstance(records, list):
            raise ValueError("export output is not a JSON array")
        return [Task.from_export(r) for r in records]
    except (ValueError, KeyError, TypeError) as exc:
        raise StoreUnavailable(f"Could not parse task export: {exc}") from exc


class TaskWarrior:
    """Thin wrapper over the ``task`` CLI.

    Usage::

        tw = TaskWarrior()
        tasks = tw.export(["project:home", "status:pending"])
        tasks[0].estimate = 0
        tw.save(tasks[0])
    """

    def __init__(self, bin: str = "task") -> None:
        self.bin = bin

    def _task(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        cmd = [self.bin, *RC_OVERRIDES, *args]
        log.debug(f"$ {shlex.join(cmd)}")
        try:
            r = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise StoreUnavailable(f"{self.bin} could not be run: {exc}", command=cmd) from exc

        if check and r.returncode != 0:
            stderr = (r.stderr or "").strip()
            detail = stderr.splitlines()[0] if stderr else f"exit code {r.returncode}"
            raise StoreUnavailable(
                f"`{self.bin} {' '.join(args)}` failed: {detail}",
                command=cmd,
                stderr=stderr,
            )
        return r

    def export(self, filters: Iterable[str] = ()) -> list[Task]:
        r = self._task(*filters, "export")
        return parse_export(r.stdout)

    def save(self, task: Task) -> None:
        """Overwrite every tracked field of *task* in the store."""
        self._task(task.uuid, "modify", *task.modify_args())

    def ensure_uda(self, name: str, type: str, label: str = "") -> None:
        """Define a user-defined attribute unless it already has *type*."""
        r = self._task("_get", f"rc.uda.{name}.type", check=False)
        if r.returncode == 0 and r.stdout.strip() == type:
            return
        log.debug(f"Defining UDA {name} ({type})")
        self._task("config", f"uda.{name}.type", type)
        if label:
            self._task("config", f"uda.{name}.label", label)
