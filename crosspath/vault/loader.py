"""Vault document store and embed link resolution."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from ..errors import PersistenceFailure

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


def _is_hidden(rel: PurePosixPath) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def _has_scheme(link: str) -> bool:
    head, sep, _ = link.partition(":")
    return bool(sep) and len(head) > 1 and head.replace("+", "").replace("-", "").replace(".", "").isalnum()


class Vault:
    """Filesystem-backed document store for one vault directory.

    Document ids are vault-relative posix paths. Hidden files and
    directories are ignored, as the host does.
    """

    def __init__(self, path: Path):
        self.path = path
        self._files: list[str] | None = None

    # -- listing -----------------------------------------------------------

    def _scan_files(self) -> list[str]:
        files = []
        for root, dirs, names in os.walk(self.path):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            for name in sorted(names):
                if name.startswith("."):
                    continue
                rel = (Path(root) / name).relative_to(self.path)
                files.append(rel.as_posix())
        return files

    def all_files(self) -> list[str]:
        """All non-hidden files in the vault (cached until ``refresh``)."""
        if self._files is None:
            self._files = self._scan_files()
        return self._files

    def refresh(self) -> None:
        self._files = None

    def list_documents(self) -> list[str]:
        """Ids of every markdown note in the vault."""
        return [f for f in self.all_files() if f.lower().endswith(NOTE_SUFFIX)]

    def document_id(self, path: Path) -> str:
        """Vault-relative id for an absolute or relative path."""
        if not path.is_absolute():
            path = self.path / path
        return path.resolve().relative_to(self.path.resolve()).as_posix()

    def absolute_path(self, document_id: str) -> Path:
        return self.path / PurePosixPath(document_id)

    # -- reading/writing ---------------------------------------------------

    def read_document(self, document_id: str) -> str:
        # newline="" keeps CRLF notes byte-identical when written back
        with self.absolute_path(document_id).open("r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_document(self, document_id: str, text: str) -> None:
        """Replace a note's content.

        Raises:
            PersistenceFailure: If the note cannot be written
        """
        path = self.absolute_path(document_id)
        try:
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise PersistenceFailure(f"Could not write {document_id}: {e}") from e
        logger.debug("Wrote %s (%d bytes)", document_id, len(text.encode("utf-8")))

    # -- link resolution ---------------------------------------------------

    def resolve_embed_target(self, raw_link: str, from_document: str) -> str | None:
        """Resolve an embed link the way the host does.

        Order: relative to the linking note, then vault-root relative, then
        the shortest vault path ending with the link. Matching is
        case-insensitive. Returns the target's id or None.
        """
        link = raw_link.split("|", 1)[0].split("#", 1)[0].strip()
        if not link or _has_scheme(link):
            return None
        link = unquote(link).replace("\\", "/")

        by_lower = {f.lower(): f for f in self.all_files()}
        source_dir = PurePosixPath(from_document).parent

        candidates: list[str] = []
        if link.startswith("/"):
            candidates.append(link.lstrip("/"))
        else:
            candidates.append(_normalize(source_dir / link))
            candidates.append(_normalize(PurePosixPath(link)))

        for candidate in candidates:
            if candidate is None:
                continue
            found = by_lower.get(candidate.lower())
            if found is not None:
                return found

        suffix = "/" + link.lstrip("./").lower()
        matches = [f for f in self.all_files() if ("/" + f.lower()).endswith(suffix)]
        if not matches:
            return None
        matches.sort(key=lambda f: (f.count("/"), f))
        return matches[0]


def _normalize(path: PurePosixPath) -> str | None:
    """Collapse ``.`` and ``..``; None if the path escapes the vault root."""
    parts: list[str] = []
    for part in path.parts:
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                return None
            parts.pop()
        else:
            parts.append(part)
    return "/".join(parts)


def load_vault(vault_path: Path) -> Vault:
    """Open a vault directory.

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    if not vault_path.is_dir():
        raise FileNotFoundError(f"Vault directory not found: {vault_path}")
    return Vault(vault_path)
