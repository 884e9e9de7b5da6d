"""Data models for computer profiles and asset references."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Platform(str, Enum):
    """Operating systems a computer profile can describe."""

    MACOS = "macos"
    WINDOWS = "windows"

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Parse a platform name, accepting the host's legacy spellings."""
        normalized = value.strip().lower()
        legacy = {"darwin": cls.MACOS, "mac": cls.MACOS, "win32": cls.WINDOWS, "win": cls.WINDOWS}
        if normalized in legacy:
            return legacy[normalized]
        return cls(normalized)


@dataclass(frozen=True)
class LiveIdentity:
    """The platform and account the engine is currently running under."""

    platform: Platform | None
    username: str

    @property
    def known(self) -> bool:
        return self.platform is not None and bool(self.username)


@dataclass
class ComputerProfile:
    """One registered machine/account pairing that can produce asset paths."""

    id: str
    display_name: str
    platform: Platform
    username: str
    sub_path: str = ""  # between the home directory and the documents root

    def is_current(self, live: LiveIdentity | None) -> bool:
        """True if this profile describes the live machine (never persisted)."""
        if live is None or not live.known:
            return False
        return self.platform == live.platform and self.username == live.username

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted settings record."""
        return {
            "id": self.id,
            "displayName": self.display_name,
            "platform": self.platform.value,
            "username": self.username,
            "subPath": self.sub_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComputerProfile":
        """Create from a persisted settings record."""
        return cls(
            id=str(data["id"]),
            display_name=str(data.get("displayName") or data.get("name") or data["id"]),
            platform=Platform.parse(str(data["platform"])),
            username=str(data["username"]),
            sub_path=str(data.get("subPath") or ""),
        )


@dataclass(frozen=True)
class AssetReference:
    """An embed of an asset found while scanning one document."""

    document_id: str  # vault-relative posix path
    line_index: int
    column_offset: int
    raw_matched_text: str
    resolved_target_id: str


@dataclass
class DocumentHits:
    """All references to one asset inside a single document."""

    document_id: str
    references: list[AssetReference] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.references)


@dataclass(frozen=True)
class ExcludePosition:
    """The embed the user just edited directly in the active document."""

    document_id: str
    line_index: int
    column_offset: int

    def matches(self, ref: AssetReference) -> bool:
        return (
            ref.document_id == self.document_id
            and ref.line_index == self.line_index
            and ref.column_offset == self.column_offset
        )
