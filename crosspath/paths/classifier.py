"""Decide which registered computer produced an absolute path."""

import logging
import re
from typing import Iterable

from ..models import ComputerProfile, LiveIdentity, Platform

logger = logging.getLogger(__name__)


def _mac_user_pattern(username: str) -> re.Pattern[str]:
    # a drive letter in front means a Windows path that merely contains /Users/<name>/
    return re.compile(rf"(?<![A-Za-z]:)/Users/{re.escape(username)}/")


def _windows_user_pattern(username: str) -> re.Pattern[str]:
    return re.compile(rf"[A-Za-z]:[/\\]Users[/\\]{re.escape(username)}[/\\]", re.IGNORECASE)


def matches_profile(path: str, profile: ComputerProfile) -> bool:
    """True if ``path`` lies under the home directory convention of ``profile``.

    The trailing separator is required so that ``/Users/al/`` never matches
    a path belonging to ``alice``.
    """
    if not profile.username:
        return False
    if profile.platform == Platform.MACOS:
        return _mac_user_pattern(profile.username).search(path) is not None
    if profile.platform == Platform.WINDOWS:
        return _windows_user_pattern(profile.username).search(path) is not None
    return False


def find_source_profile(path: str, profiles: Iterable[ComputerProfile]) -> ComputerProfile | None:
    """First profile (in registration order) whose convention matches ``path``."""
    for profile in profiles:
        if matches_profile(path, profile):
            return profile
    return None


def classify(
    path: str,
    profiles: Iterable[ComputerProfile],
    live: LiveIdentity | None = None,
) -> ComputerProfile | None:
    """Return the foreign profile that produced ``path``, or None.

    The live computer's own profile is skipped: a path already in the
    current convention never needs translation.
    """
    foreign = [p for p in profiles if not p.is_current(live)]
    profile = find_source_profile(path, foreign)
    if profile is None:
        logger.debug("No foreign profile matched %s", path[:80])
    else:
        logger.debug("Path %s classified as %s (%s)", path[:80], profile.display_name, profile.platform.value)
    return profile
