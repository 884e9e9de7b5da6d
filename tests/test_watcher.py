from pathlib import Path

from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from crosspath.engine import CrossPathEngine
from crosspath.watcher import VaultEventHandler

FOREIGN = "![cat](file:///Users/alice/Dropbox/img/cat.png)\n"
CONVERTED = "![cat](file:///C:/Users/alice/img/cat.png)\n"


def _handler(engine: CrossPathEngine, events: list[str]) -> VaultEventHandler:
    engine.settings.auto_convert_on_open = True
    return VaultEventHandler(engine, on_event=events.append)


def test_modified_note_is_converted_once(engine: CrossPathEngine, vault_path: Path, write_note) -> None:
    events: list[str] = []
    handler = _handler(engine, events)
    path = write_note(vault_path, "note.md", FOREIGN)

    handler.on_modified(FileModifiedEvent(str(path)))
    assert handler.flush_pending(force=True) == 1
    assert path.read_text(encoding="utf-8") == CONVERTED
    assert events == ["~ note.md: 1 path converted"]

    # the modification caused by our own write
    handler.on_modified(FileModifiedEvent(str(path)))
    assert handler.flush_pending(force=True) == 0
    assert engine.last_mutated_document is None


def test_events_are_debounced(engine: CrossPathEngine, vault_path: Path, write_note) -> None:
    handler = _handler(engine, [])
    path = write_note(vault_path, "note.md", FOREIGN)

    handler.on_created(FileCreatedEvent(str(path)))
    handler.on_modified(FileModifiedEvent(str(path)))

    assert handler.flush_pending() == 0
    assert list(handler.pending) == [str(path)]
    assert path.read_text(encoding="utf-8") == FOREIGN


def test_irrelevant_paths_are_ignored(engine: CrossPathEngine, vault_path: Path, write_note) -> None:
    handler = _handler(engine, [])
    hidden = write_note(vault_path, ".obsidian/workspace.md", FOREIGN)
    image = vault_path / "cat.png"
    image.write_bytes(b"\x89PNG")

    handler.on_modified(FileModifiedEvent(str(hidden)))
    handler.on_created(FileCreatedEvent(str(image)))

    assert handler.pending == {}


def test_moved_note_is_queued_under_new_name(engine: CrossPathEngine, vault_path: Path, write_note) -> None:
    handler = _handler(engine, [])
    old = vault_path / "draft.md"
    new = write_note(vault_path, "final.md", FOREIGN)

    handler.on_moved(FileMovedEvent(str(old), str(new)))

    assert list(handler.pending) == [str(new)]
    assert handler.flush_pending(force=True) == 1
    assert new.read_text(encoding="utf-8") == CONVERTED
