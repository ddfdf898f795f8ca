# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Console output for the bootstrap agent.

All diagnostics go to stderr through :data:`out`.  stdout carries
exactly one line, the readiness sentinel, written by :func:`ready`.
"""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .constants import READINESS_SENTINEL


class Output:
    """Styled progress and diagnostic messages on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True, highlight=False)

    def info(self, msg: str) -> None:
        self.console.print(escape(msg))

    def dim(self, msg: str) -> None:
        self.console.print(f"[dim]{escape(msg)}[/dim]")

    def warning(self, msg: str) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {escape(msg)}")

    def error(self, msg: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(msg)}")

    def hint(self, msg: str) -> None:
        # Hints may carry rich markup on purpose
        self.console.print(f"[dim]Hint:[/dim] {msg}")


out = Output()


def setup_logging(verbose: bool) -> None:
    """Route ``logging`` through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=out.console, show_path=verbose)],
        force=True,
    )


def ready() -> None:
    """Write the readiness sentinel to stdout."""
    sys.stdout.write(READINESS_SENTINEL + "\n")
    sys.stdout.flush()
