"""Asset library boundary.

The library client itself (item lookup, metadata updates, add-from-path) is
an external collaborator; crosspath only needs to resolve an item to its
file and to find item identifiers in note text. ``LibraryFolder`` reads the
library's own directory (``images/<ID>.info/metadata.json``) so that
resolution works without the library application running.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .paths.codec import encode_location

logger = logging.getLogger(__name__)

ASSET_URL_SCHEME = "eagle://"
ASSET_ITEM_PATTERN = re.compile(r"eagle://item/([A-Z0-9]+)", re.IGNORECASE)
_ASSET_URL_PATTERN = re.compile(r"^eagle://(item|folder)/([A-Z0-9]+)$", re.IGNORECASE)


@dataclass(frozen=True)
class LibraryAsset:
    """What the library knows about one item."""

    id: str
    canonical_name: str
    extension: str
    original_file_path: str | None = None

    @property
    def filename(self) -> str:
        return f"{self.canonical_name}.{self.extension}" if self.extension else self.canonical_name


class AssetLibrary(Protocol):
    """Lookup side of the asset library client."""

    def resolve_asset(self, asset_id: str) -> LibraryAsset | None:
        ...


class LibraryFolder:
    """Read-only view of a library directory on disk."""

    def __init__(self, path: Path):
        self.path = path

    def resolve_asset(self, asset_id: str) -> LibraryAsset | None:
        info_dir = self.path / "images" / f"{asset_id}.info"
        metadata_path = info_dir / "metadata.json"
        if not metadata_path.is_file():
            return None
        try:
            data = json.loads(metadata_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Unreadable metadata for item %s: %s", asset_id, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Unexpected metadata for item %s", asset_id)
            return None

        asset = LibraryAsset(
            id=str(data.get("id") or asset_id),
            canonical_name=str(data.get("name") or asset_id),
            extension=str(data.get("ext") or ""),
        )
        file_path = info_dir / asset.filename
        if not file_path.is_file():
            logger.debug("Item %s has no original file at %s", asset_id, file_path)
            return asset
        return LibraryAsset(
            id=asset.id,
            canonical_name=asset.canonical_name,
            extension=asset.extension,
            original_file_path=file_path.resolve().as_posix(),
        )


def extract_asset_ids(text: str) -> list[str]:
    """Extract library item ids from note text.

    Returns ids in first-seen order, deduplicated.
    """
    seen = set()
    result = []
    for match in ASSET_ITEM_PATTERN.findall(text):
        if match not in seen:
            seen.add(match)
            result.append(match)
    return result


def build_asset_url(asset_id: str, kind: str = "item") -> str:
    return f"{ASSET_URL_SCHEME}{kind}/{asset_id}"


def parse_asset_url(url: str) -> tuple[str, str] | None:
    """Split ``eagle://item/ID`` into ("item", "ID"); None if not a library URL."""
    match = _ASSET_URL_PATTERN.match(url.strip())
    if not match:
        return None
    return match.group(1).lower(), match.group(2)


def item_file_location(library: AssetLibrary, url: str) -> str | None:
    """``file://`` identifier of the original file behind ``eagle://item/ID``.

    None if ``url`` is not an item URL, or the item or its file is unknown.
    """
    parsed = parse_asset_url(url)
    if parsed is None or parsed[0] != "item":
        return None
    asset = library.resolve_asset(parsed[1])
    if asset is None or not asset.original_file_path:
        return None
    return encode_location(asset.original_file_path)
