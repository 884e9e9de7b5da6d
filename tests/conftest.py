"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from crosspath.engine import CrossPathEngine
from crosspath.models import ComputerProfile, LiveIdentity, Platform
from crosspath.notices import RecordingNotifier


@pytest.fixture
def mac_alice() -> ComputerProfile:
    """Profile A: macOS, alice, assets under ~/Dropbox."""
    return ComputerProfile(
        id="A",
        display_name="Studio Mac",
        platform=Platform.MACOS,
        username="alice",
        sub_path="Dropbox",
    )


@pytest.fixture
def win_alice() -> ComputerProfile:
    """Profile B: Windows, alice, no sub-path."""
    return ComputerProfile(
        id="B",
        display_name="Office PC",
        platform=Platform.WINDOWS,
        username="alice",
    )


@pytest.fixture
def profiles(mac_alice: ComputerProfile, win_alice: ComputerProfile) -> list[ComputerProfile]:
    return [mac_alice, win_alice]


@pytest.fixture
def live_windows() -> LiveIdentity:
    return LiveIdentity(platform=Platform.WINDOWS, username="alice")


@pytest.fixture
def live_mac() -> LiveIdentity:
    return LiveIdentity(platform=Platform.MACOS, username="alice")


def _write_settings(vault_path: Path, profiles: list[ComputerProfile], **options) -> Path:
    """Write a settings blob for ``vault_path`` and return its path."""
    settings_path = vault_path / ".crosspath" / "settings.json"
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    data = {"computers": [p.to_dict() for p in profiles], **options}
    settings_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return settings_path


def _write_note(vault_path: Path, document_id: str, text: str) -> Path:
    path = vault_path / document_id
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write_settings():
    """Helper writing a settings blob: write_settings(vault_path, profiles, **options)."""
    return _write_settings


@pytest.fixture
def write_note():
    """Helper writing a note: write_note(vault_path, document_id, text)."""
    return _write_note


@pytest.fixture
def vault_path(tmp_path: Path) -> Path:
    """Empty vault directory."""
    path = tmp_path / "vault"
    (path / ".obsidian").mkdir(parents=True)
    return path


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(vault_path: Path, profiles: list[ComputerProfile], notifier: RecordingNotifier) -> CrossPathEngine:
    """Engine running as alice on the Windows machine (profile B)."""
    _write_settings(vault_path, profiles)
    return CrossPathEngine.open(vault_path, platform=Platform.WINDOWS, username="alice", notifier=notifier)


@pytest.fixture
def asset_library(tmp_path: Path) -> Path:
    """Library directory holding item KQ2ZT7 (cat.png) and a broken item BAD1."""
    library = tmp_path / "Photos.library"
    item = library / "images" / "KQ2ZT7.info"
    item.mkdir(parents=True)
    (item / "metadata.json").write_text(json.dumps({"id": "KQ2ZT7", "name": "cat", "ext": "png"}), encoding="utf-8")
    (item / "cat.png").write_bytes(b"\x89PNG")
    broken = library / "images" / "BAD1.info"
    broken.mkdir()
    (broken / "metadata.json").write_text("{not json", encoding="utf-8")
    return library
