"""Note store: one UTF-8 text file per task, named after the task uuid."""

from __future__ import annotations

from pathlib import Path

from taskn.errors import NoteIOError


class NoteStore:
    """Whole-file reads and writes of task notes under *root*.

    A task without a note has no file; an empty note is never written.
    """

    def __init__(self, root: Path | str, file_format: str = "md") -> None:
        self.root = Path(root)
        self.file_format = file_format.lstrip(".")

    def path(self, key: str) -> Path:
        return self.root / f"{key}.{self.file_format}"

    def read(self, key: str) -> str:
        """Return the note for *key*, or ``""`` when none exists."""
        try:
            return self.path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteIOError(f"Failed to read note {self.path(key)}: {exc}") from exc

    def read_many(self, keys: list[str]) -> dict[str, str]:
        return {key: self.read(key) for key in keys}

    def write(self, key: str, text: str) -> None:
        """Store *text* for *key*; empty text removes the note."""
        target = self.path(key)
        try:
            if not text:
                target.unlink(missing_ok=True)
                return
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise NoteIOError(f"Failed to write note {target}: {exc}") from exc
