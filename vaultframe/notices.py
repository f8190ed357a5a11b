"""User-facing notifications for query and parse failures."""

from __future__ import annotations

from typing import Literal, Protocol

from rich.console import Console

from .models import DataFrame

Level = Literal["info", "warning", "error"]

_STYLES = {"info": "dim", "warning": "yellow", "error": "red"}


class Notifier(Protocol):
    """The host's notification surface."""

    def notify(self, message: str, level: Level = "info") -> None:
        ...


class ConsoleNotifier:
    """Notifier printing to a rich console (stderr by default)."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def notify(self, message: str, level: Level = "info") -> None:
        style = _STYLES.get(level, "")
        self.console.print(f"[{style}]{message}[/{style}]" if style else message, highlight=False)


def report_frame_errors(frame: DataFrame, notifier: Notifier) -> int:
    """Report each note that failed to load; returns how many were reported."""
    for error in frame.errors:
        notifier.notify(f"Could not read {error.path}: {error.message}", "warning")
    return len(frame.errors)
