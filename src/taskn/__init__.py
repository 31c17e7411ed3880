"""taskn: notes, ordering and an interactive browser for Taskwarrior tasks."""

__version__ = "0.3.0"
