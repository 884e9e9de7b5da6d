"""Live identity detection.

The username is read back from where the vault itself lives on disk
(``/Users/<name>/...`` or ``<drive>:\\Users\\<name>\\...``), not queried from
the operating system. A vault stored outside the home directory therefore
yields an empty username and no profile will be treated as current.
"""

import re
import sys
from pathlib import Path

from .models import LiveIdentity, Platform

_MAC_HOME = re.compile(r"^/Users/([^/]+)")
_WINDOWS_HOME = re.compile(r"^[A-Za-z]:[/\\]Users[/\\]([^/\\]+)", re.IGNORECASE)


def current_platform(sys_platform: str | None = None) -> Platform | None:
    """Map ``sys.platform`` onto a profile platform (None if unsupported)."""
    value = sys_platform if sys_platform is not None else sys.platform
    if value == "darwin":
        return Platform.MACOS
    if value == "win32":
        return Platform.WINDOWS
    return None


def username_from_vault_path(vault_path: str | Path, platform: Platform | None) -> str:
    """Extract the account name from the vault's absolute location."""
    text = str(vault_path)
    if platform == Platform.MACOS:
        match = _MAC_HOME.match(text.replace("\\", "/"))
    elif platform == Platform.WINDOWS:
        match = _WINDOWS_HOME.match(text)
    else:
        return ""
    return match.group(1) if match else ""


def detect_live_identity(
    vault_path: Path,
    platform: Platform | None = None,
    username: str | None = None,
) -> LiveIdentity:
    """Build the live identity, honoring explicit overrides."""
    resolved_platform = platform if platform is not None else current_platform()
    resolved_username = username if username is not None else username_from_vault_path(vault_path, resolved_platform)
    return LiveIdentity(platform=resolved_platform, username=resolved_username)
