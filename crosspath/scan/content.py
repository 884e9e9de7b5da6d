"""Content-mode scan: rewrite foreign file:// embeds in a note's text."""

import logging
import re
from dataclasses import dataclass

from ..vault.parser import FILE_URL_EMBED_PATTERN, file_url_span, iter_fenced
from .pipeline import LocationConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentScanResult:
    """Outcome of one content-mode pass."""

    text: str
    converted_count: int

    @property
    def changed(self) -> bool:
        return self.converted_count > 0


def scan_content(text: str, converter: LocationConverter) -> ContentScanResult:
    """Rewrite every ``![alt](file://...)`` embed whose identifier changes.

    Frontmatter embeds are converted too; fenced code blocks are literal
    text and stay as written. Only the identifier is replaced, so an
    ``<...>`` wrapper or a ``"title"`` survives. Converted identifiers are
    in the live computer's own convention, so a second pass finds nothing
    to do.
    """
    count = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal count
        start, end = file_url_span(match)
        original_url = match.string[start:end]
        new_url = converter(original_url)
        if new_url is None:
            return match.group(0)
        count += 1
        logger.debug("Content: %s -> %s", original_url[:60], new_url[:60])
        offset = match.start()
        whole = match.group(0)
        return whole[: start - offset] + new_url + whole[end - offset :]

    lines = []
    for _, line, in_code in iter_fenced(text.split("\n")):
        lines.append(line if in_code else FILE_URL_EMBED_PATTERN.sub(_replace, line))
    return ContentScanResult(text="\n".join(lines), converted_count=count)
