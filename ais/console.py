"""Shared terminal output for status lines and diagnostics."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def configure_logging(verbose: bool = False) -> None:
    """Route ``ais.*`` loggers to stderr; debug traces only when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
