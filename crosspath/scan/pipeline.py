"""Classify, translate and re-encode a single location identifier."""

import logging
from typing import Callable, Iterable

from ..models import ComputerProfile, LiveIdentity
from ..paths.classifier import classify
from ..paths.codec import encode_location, extract_local_path
from ..paths.translator import find_current_profile, translate_path

logger = logging.getLogger(__name__)

# identifier -> corrected identifier, or None when nothing should change
LocationConverter = Callable[[str], "str | None"]


def convert_identifier(
    identifier: str,
    profiles: Iterable[ComputerProfile],
    live: LiveIdentity | None,
) -> str | None:
    """Return the identifier rewritten for the live computer, or None.

    None covers every no-op: remote URLs, unclassifiable paths, a missing
    live profile, and failed root extraction.
    """
    path = extract_local_path(identifier)
    if path is None:
        return None

    profiles = list(profiles)
    source = classify(path, profiles, live)
    if source is None:
        return None

    translation = translate_path(path, source, find_current_profile(profiles, live))
    if not translation.changed:
        logger.debug("No translation for %s: %s", path[:80], translation.status.value)
        return None

    converted = encode_location(translation.path)
    if converted == identifier:
        return None
    return converted


def make_converter(profiles: Iterable[ComputerProfile], live: LiveIdentity | None) -> LocationConverter:
    """Bind a profile list and live identity into a converter callable."""
    frozen = list(profiles)

    def _convert(identifier: str) -> str | None:
        return convert_identifier(identifier, frozen, live)

    return _convert
