"""Allow ``python -m taskn``."""

from taskn.cli import main

main()
