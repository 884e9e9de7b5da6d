"""Rewrite a path from its source computer's layout to the live computer's.

Translation is string rewriting only: nothing here touches the filesystem.
Whenever the source root cannot be located in the input, the input is
returned unchanged rather than as a partial rewrite.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..models import ComputerProfile, LiveIdentity, Platform
from .classifier import classify

logger = logging.getLogger(__name__)

# Windows targets are always anchored to the system drive
WINDOWS_TARGET_DRIVE = "C:"


class TranslationStatus(str, Enum):
    """Outcome of a translation attempt."""

    TRANSLATED = "translated"
    UNCLASSIFIABLE = "unclassifiable"
    NO_CURRENT_PROFILE = "no_current_profile"
    SAME_PROFILE = "same_profile"
    EXTRACTION_FAILED = "extraction_failed"


@dataclass(frozen=True)
class Translation:
    """A translated path plus how it was obtained."""

    path: str
    status: TranslationStatus
    source: ComputerProfile | None = None
    target: ComputerProfile | None = None

    @property
    def changed(self) -> bool:
        return self.status == TranslationStatus.TRANSLATED


def _sub_path_segments(profile: ComputerProfile) -> list[str]:
    return [s for s in re.split(r"[/\\]+", profile.sub_path) if s]


def source_root_pattern(profile: ComputerProfile) -> re.Pattern[str]:
    """Anchored pattern for the root prefix of a source profile."""
    segments = [re.escape(profile.username), *(re.escape(s) for s in _sub_path_segments(profile))]
    if profile.platform == Platform.MACOS:
        return re.compile("^/Users/" + "/".join(segments) + "/")
    sep = r"[/\\]"
    return re.compile(rf"^[A-Za-z]:{sep}Users{sep}" + sep.join(segments) + sep, re.IGNORECASE)


def target_root(profile: ComputerProfile) -> str:
    """Root prefix of the live profile, in the live platform's convention."""
    parts = ["Users", profile.username, *_sub_path_segments(profile)]
    if profile.platform == Platform.MACOS:
        return "/" + "/".join(parts) + "/"
    return f"{WINDOWS_TARGET_DRIVE}/" + "/".join(parts) + "/"


def translate_path(
    path: str,
    source: ComputerProfile | None,
    current: ComputerProfile | None,
) -> Translation:
    """Move ``path`` from ``source``'s root to ``current``'s root."""
    if source is None:
        return Translation(path, TranslationStatus.UNCLASSIFIABLE)
    if current is None:
        return Translation(path, TranslationStatus.NO_CURRENT_PROFILE, source=source)
    if source.id == current.id:
        return Translation(path, TranslationStatus.SAME_PROFILE, source=source, target=current)

    match = source_root_pattern(source).match(path)
    if match is None:
        logger.debug("Source root of %s not found in %s", source.display_name, path[:80])
        return Translation(path, TranslationStatus.EXTRACTION_FAILED, source=source, target=current)

    remainder = path[match.end():].replace("\\", "/")
    translated = target_root(current) + remainder

    logger.debug(
        "Converting %s/%s/%s -> %s/%s/%s",
        source.platform.value,
        source.username,
        source.sub_path,
        current.platform.value,
        current.username,
        current.sub_path,
    )
    return Translation(translated, TranslationStatus.TRANSLATED, source=source, target=current)


def find_current_profile(
    profiles: Iterable[ComputerProfile],
    live: LiveIdentity | None,
) -> ComputerProfile | None:
    for profile in profiles:
        if profile.is_current(live):
            return profile
    return None


def translate_detailed(
    path: str,
    profiles: Iterable[ComputerProfile],
    live: LiveIdentity | None,
) -> Translation:
    """Classify ``path`` and translate it toward the live profile."""
    profiles = list(profiles)
    source = classify(path, profiles, live)
    current = find_current_profile(profiles, live)
    return translate_path(path, source, current)


def translate(
    path: str,
    profiles: Iterable[ComputerProfile],
    live: LiveIdentity | None,
) -> str:
    """Translated path, or ``path`` unchanged when no translation applies."""
    return translate_detailed(path, profiles, live).path
