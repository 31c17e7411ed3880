"""Configuration defaults, env vars, and runtime options for taskn."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_FILE_FORMAT = "md"
DEFAULT_ROOT_DIR = "~/.taskn"
DEFAULT_TASK_BIN = "task"

# Filter that selects the tasks the interactive session and reorder work on.
PENDING_FILTER = "status:pending"


@dataclass
class Config:
    """Runtime configuration, mirroring the global CLI flags."""

    # Notes
    editor: str = ""
    file_format: str = DEFAULT_FILE_FORMAT
    root_dir: str = ""

    # Task store
    task_bin: str = ""
    args: list[str] = field(default_factory=list)

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.editor:
            self.editor = os.environ.get("EDITOR") or "vi"
        if not self.root_dir:
            self.root_dir = os.environ.get("TASKN_ROOT_DIR") or DEFAULT_ROOT_DIR
        self.root_dir = os.path.expanduser(self.root_dir)
        if not self.task_bin:
            self.task_bin = os.environ.get("TASKN_TASK_BIN") or DEFAULT_TASK_BIN
        self.file_format = self.file_format.lstrip(".") or DEFAULT_FILE_FORMAT

    @property
    def notes_dir(self) -> Path:
        return Path(self.root_dir)

    def pending_filter(self) -> list[str]:
        """Passthrough filter arguments narrowed to pending tasks."""
        return [*self.args, PENDING_FILTER]
