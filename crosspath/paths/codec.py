"""Conversion between decoded filesystem paths and location identifiers.

Paths are rendered as ``file://`` URIs with each segment percent-encoded.
Windows absolute paths keep their drive colon and use the three-slash form
(``file:///C:/...``); every other path is appended to ``file://`` as-is, so
an absolute POSIX path yields ``file:///Users/...`` with no extra empty
segment.
"""

import logging
import re
from urllib.parse import quote, unquote

from ..errors import MalformedIdentifier

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped in addition to alphanumerics and "-_.~"
_SEGMENT_SAFE = "!'()*"

_DRIVE_PATH = re.compile(r"^[A-Za-z]:(/|$)")
_ENCODED_DRIVE = re.compile(r"^([A-Za-z])%3A", re.IGNORECASE)
_SLASHED_DRIVE = re.compile(r"^/[A-Za-z](:|%3A)", re.IGNORECASE)
_FILE_SCHEME = re.compile(r"^file://", re.IGNORECASE)
_APP_SCHEME = re.compile(r"^app://[^/]+/(.+)$", re.IGNORECASE)
_ANY_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

MAX_DECODE_PASSES = 8


def decode_once(text: str) -> str:
    """One strict percent-decoding pass.

    Raises:
        MalformedIdentifier: If an escape sequence is not valid UTF-8
    """
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedIdentifier(f"Undecodable escape in {text!r}: {e}") from e


def fully_decode(text: str) -> str:
    """Percent-decode until a fixed point, unwinding accidental double encoding.

    A pass that hits an undecodable sequence stops the loop and the last
    successful decode is returned.
    """
    decoded = text
    for _ in range(MAX_DECODE_PASSES):
        if "%" not in decoded:
            break
        try:
            candidate = decode_once(decoded)
        except MalformedIdentifier as e:
            logger.warning("%s; keeping partial decode %r", e, decoded)
            break
        if candidate == decoded:
            break
        decoded = candidate
    return decoded


def _strip_scheme(identifier: str) -> str | None:
    """Return the path portion of a local identifier, or None if it is remote."""
    if _FILE_SCHEME.match(identifier):
        remainder = _FILE_SCHEME.sub("", identifier, count=1)
        # file:///C:/... carries one slash too many for a drive path
        if _SLASHED_DRIVE.match(remainder):
            remainder = remainder[1:]
        return remainder

    app_match = _APP_SCHEME.match(identifier)
    if app_match:
        return app_match.group(1)

    if _ANY_SCHEME.match(identifier) or identifier.lower().startswith(("eagle:", "data:", "mailto:")):
        return None

    return identifier


def decode_location(identifier: str) -> str:
    """Convert a location identifier into a decoded filesystem path.

    Remote identifiers come back unchanged.
    """
    path = extract_local_path(identifier)
    return identifier if path is None else path


def extract_local_path(identifier: str) -> str | None:
    """Decode a local identifier into a path; None for remote URLs."""
    remainder = _strip_scheme(identifier.strip())
    if remainder is None:
        return None

    path = fully_decode(remainder)

    # Some producers drop the leading slash of macOS paths
    if path.startswith("Users/"):
        path = "/" + path

    return path


def encode_location(path: str) -> str:
    """Convert a decoded path into a ``file://`` location identifier."""
    normalized = path.replace("\\", "/")
    encoded = "/".join(quote(segment, safe=_SEGMENT_SAFE) for segment in normalized.split("/"))

    if _DRIVE_PATH.match(normalized):
        encoded = _ENCODED_DRIVE.sub(r"\1:", encoded, count=1)
        return f"file:///{encoded}"
    return f"file://{encoded}"


def is_windows_path(path: str) -> bool:
    """True for drive-letter absolute paths such as ``C:/Users/...``."""
    return bool(_DRIVE_PATH.match(path.replace("\\", "/")))
