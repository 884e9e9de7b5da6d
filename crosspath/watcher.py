"""
File system watcher that feeds note lifecycle events to the engine.

This module provides:
- Watchdog-based note monitoring
- Debounced delivery (editor save cycles collapse into one open)
- Filtering to markdown notes outside hidden directories
"""

import logging
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .engine import CrossPathEngine
from .notices import plural

logger = logging.getLogger(__name__)


class PendingOpen:
    """Tracks a pending note event for debouncing."""

    def __init__(self, path: Path, timestamp: float):
        self.path = path
        self.timestamp = timestamp


class VaultEventHandler(FileSystemEventHandler):
    """
    Turns note creations and modifications into ``on_document_open`` calls.

    Key behaviors:
    - Debounces rapid modifications
    - Only markdown notes count; hidden paths are ignored
    - The engine's own writes are filtered by its self-write guard
    """

    RELEVANT_EXTENSIONS = {".md"}
    DEBOUNCE_SECONDS = 1.0

    def __init__(
        self,
        engine: CrossPathEngine,
        on_event: Callable[[str], None] | None = None,
    ):
        """
        Initialize the event handler.

        Args:
            engine: Engine that receives the open events
            on_event: Callback for notifications (receives a formatted string)
        """
        super().__init__()
        self.engine = engine
        self.vault_path = engine.vault.path.resolve()
        self.on_event = on_event
        self.pending: dict[str, PendingOpen] = {}

    def _is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.resolve().relative_to(self.vault_path)
        except ValueError:
            return False

        # Skip hidden files and directories
        if any(part.startswith(".") for part in rel.parts):
            return False

        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _queue(self, path_str: str) -> None:
        self.pending[path_str] = PendingOpen(path=Path(path_str), timestamp=time.time())

    def flush_pending(self, force: bool = False) -> int:
        """Deliver pending events that have passed the debounce window.

        Returns the number of documents converted.
        """
        now = time.time()
        due = [
            (path_str, pending)
            for path_str, pending in list(self.pending.items())
            if force or now - pending.timestamp >= self.DEBOUNCE_SECONDS
        ]

        converted = 0
        for path_str, pending in due:
            del self.pending[path_str]
            if not pending.path.exists():
                continue

            document_id = self.engine.vault.document_id(pending.path)
            self.engine.vault.refresh()
            result = self.engine.on_document_open(document_id)
            if result is None or not result.written:
                continue

            converted += 1
            if self.on_event:
                self.on_event(f"~ {document_id}: {plural(result.converted_count, 'path')} converted")

        return converted

    def on_created(self, event: FileCreatedEvent) -> None:
        if event.is_directory or not self._is_relevant(event.src_path):
            return
        self._queue(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if event.is_directory or not self._is_relevant(event.src_path):
            return
        self._queue(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        if event.is_directory:
            return
        self.pending.pop(event.src_path, None)
        if self._is_relevant(event.dest_path):
            self._queue(event.dest_path)


def watch_vault(
    engine: CrossPathEngine,
    on_event: Callable[[str], None] | None = None,
    recursive: bool = True,
) -> tuple[Observer, VaultEventHandler]:
    """
    Start watching the engine's vault.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = VaultEventHandler(engine, on_event=on_event)

    observer = Observer()
    observer.schedule(handler, str(engine.vault.path), recursive=recursive)
    observer.start()
    logger.debug("Watching %s", engine.vault.path)

    return observer, handler


def run_watch_loop(
    engine: CrossPathEngine,
    on_event: Callable[[str], None] | None = None,
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that watches for events and flushes
    pending events periodically.
    """
    observer, handler = watch_vault(engine, on_event=on_event)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
