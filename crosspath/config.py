"""Settings blob persistence and optional TOML defaults.

The durable state lives in ``<vault>/.crosspath/settings.json``. It is the
host's settings blob: keys this module does not know about are kept and
written back untouched. A read-only ``crosspath.toml`` at the vault root may
supply defaults for the scalar options.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .errors import PersistenceFailure
from .models import ComputerProfile

logger = logging.getLogger(__name__)

ConversionMode = Literal["content", "render-only"]
CONVERSION_MODES: tuple[str, ...] = ("content", "render-only")

STATE_DIRNAME = ".crosspath"
SETTINGS_FILENAME = "settings.json"
DEFAULTS_FILENAME = "crosspath.toml"

# blob key -> (attribute, default)
_SCALAR_KEYS: dict[str, tuple[str, Any]] = {
    "enableCrossPlatform": ("enable_cross_platform", True),
    "autoConvertCrossPlatformPaths": ("auto_convert_on_open", False),
    "crossPlatformConversionMode": ("conversion_mode", "content"),
    "confirmTimeout": ("confirm_timeout", 10.0),
    "assetLibraryPath": ("asset_library_path", ""),
}


@dataclass
class Settings:
    """In-memory view of the settings blob."""

    enable_cross_platform: bool = True
    auto_convert_on_open: bool = False
    conversion_mode: ConversionMode = "content"
    confirm_timeout: float = 10.0
    asset_library_path: str = ""  # asset library directory, absolute or vault-relative
    computers: list[ComputerProfile] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)  # host keys we don't own

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON blob, preserving foreign keys."""
        data = dict(self.extra)
        for key, (attr, _default) in _SCALAR_KEYS.items():
            data[key] = getattr(self, attr)
        data["computers"] = [c.to_dict() for c in self.computers]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: dict[str, Any] | None = None) -> "Settings":
        """Create from a JSON blob, filling gaps from ``defaults`` (snake_case keys)."""
        defaults = defaults or {}
        values: dict[str, Any] = {}
        for key, (attr, default) in _SCALAR_KEYS.items():
            values[attr] = data.get(key, defaults.get(attr, default))

        mode = str(values["conversion_mode"])
        if mode not in CONVERSION_MODES:
            raise ValueError(f"Unknown conversion mode: {mode!r} (expected one of {', '.join(CONVERSION_MODES)})")
        values["conversion_mode"] = mode
        values["enable_cross_platform"] = bool(values["enable_cross_platform"])
        values["auto_convert_on_open"] = bool(values["auto_convert_on_open"])
        values["asset_library_path"] = str(values["asset_library_path"] or "")
        try:
            values["confirm_timeout"] = float(values["confirm_timeout"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Bad confirmTimeout: {values['confirm_timeout']!r}") from e

        try:
            computers = [ComputerProfile.from_dict(raw) for raw in data.get("computers", []) if isinstance(raw, dict)]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed computer profile record: {e!r}") from e
        extra = {k: v for k, v in data.items() if k not in _SCALAR_KEYS and k != "computers"}
        return cls(computers=computers, extra=extra, **values)


def get_state_dir(vault_path: Path) -> Path:
    """Directory holding crosspath's durable state for a vault."""
    return vault_path / STATE_DIRNAME


def load_defaults(vault_path: Path) -> dict[str, Any]:
    """Read the ``[crosspath]`` table of ``crosspath.toml`` if present."""
    path = vault_path / DEFAULTS_FILENAME
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e
    table = data.get("crosspath", {})
    return table if isinstance(table, dict) else {}


class SettingsStore:
    """Loads and saves the settings blob for one vault."""

    def __init__(self, path: Path, defaults: dict[str, Any] | None = None):
        self.path = path
        self.defaults = defaults or {}

    @classmethod
    def for_vault(cls, vault_path: Path) -> "SettingsStore":
        return cls(get_state_dir(vault_path) / SETTINGS_FILENAME, defaults=load_defaults(vault_path))

    def load(self) -> Settings:
        """Load settings; a missing file yields defaults.

        Raises:
            ValueError: If the blob is not valid JSON or has bad values
        """
        if not self.path.exists():
            return Settings.from_dict({}, self.defaults)

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse settings {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Settings {self.path} must contain a JSON object")

        return Settings.from_dict(data, self.defaults)

    def save(self, settings: Settings) -> None:
        """Write the blob atomically.

        Raises:
            PersistenceFailure: If the file cannot be written
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceFailure(f"Could not save settings to {self.path}: {e}") from e
        logger.debug("Saved settings to %s", self.path)
