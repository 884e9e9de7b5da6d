"""User-facing notifications."""

from typing import Protocol

from rich.console import Console


class Notifier(Protocol):
    """Shows a short message to the user."""

    def notify(self, message: str, style: str | None = None) -> None:
        ...


class ConsoleNotifier:
    """Print notices to stderr through rich."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def notify(self, message: str, style: str | None = None) -> None:
        self.console.print(message, style=style, highlight=False)


class NullNotifier:
    """Discard notices."""

    def notify(self, message: str, style: str | None = None) -> None:
        return None


class RecordingNotifier:
    """Keep notices in memory (used by tests and dry runs)."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str, style: str | None = None) -> None:
        self.messages.append(message)


def plural(count: int, noun: str) -> str:
    """``1 file``, ``2 files``."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
