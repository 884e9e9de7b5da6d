"""Markdown parsing utilities for embeds and asset-library links."""

import re
from dataclasses import dataclass
from typing import Iterator, Literal

import frontmatter

# ![[target]], ![[target#section]], ![[target|size]]
WIKI_EMBED_PATTERN = re.compile(r"!\[\[([^\]|#]+)(?:#[^\]|]*)?(?:\|[^\]]*)?\]\]")

# ![alt](target) with an optional <...> wrapper and "title"
MARKDOWN_EMBED_PATTERN = re.compile(r"!\[([^\]]*)\]\(\s*(<[^>]+>|[^)\s]+)(?:\s+\"[^\"]*\")?\s*\)")

# Embeds whose target is a file:// location identifier; group "url" is the
# identifier alone, without the <...> wrapper or the title
FILE_URL_EMBED_PATTERN = re.compile(
    r"!\[(?P<alt>[^\]]*)\]\(\s*(?:<(?P<wrapped>file://[^>]+)>|(?P<url>file://[^)\s]+))(?:\s+\"[^\"]*\")?\s*\)",
    re.IGNORECASE,
)

FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")

_YAML_FRONTMATTER = frontmatter.YAMLHandler()

EmbedKind = Literal["wikilink", "markdown"]


@dataclass(frozen=True)
class Embed:
    """One embed occurrence inside a note."""

    line: int  # 0-based, counted over the whole file
    column: int
    original: str  # exact matched text
    link: str  # target as written (angle brackets removed)
    kind: EmbedKind
    alt: str = ""


def file_url_span(match: re.Match[str]) -> tuple[int, int]:
    """Start and end of the identifier inside a ``FILE_URL_EMBED_PATTERN`` match."""
    group = "wrapped" if match.group("wrapped") is not None else "url"
    return match.span(group)


def frontmatter_end(text: str) -> int:
    """Character offset just past a leading YAML frontmatter block (0 if none)."""
    if not _YAML_FRONTMATTER.detect(text):
        return 0
    try:
        _, content = _YAML_FRONTMATTER.split(text)
    except ValueError:
        # opening delimiter without a closing one
        return 0
    return len(text) - len(content)


def frontmatter_line_count(text: str) -> int:
    """Number of lines taken by a leading ``---`` frontmatter block (0 if none)."""
    end = frontmatter_end(text)
    if end == 0:
        return 0
    head = text[:end]
    return head.count("\n") + (0 if head.endswith("\n") else 1)


def iter_fenced(lines: list[str]) -> Iterator[tuple[int, str, bool]]:
    """Yield (line index, line, in_code) where in_code covers fences and their contents."""
    in_fence = False
    fence_marker = ""
    for index, line in enumerate(lines):
        fence = FENCE_PATTERN.match(line)
        if fence:
            if not in_fence:
                in_fence, fence_marker = True, fence.group(1)
                yield index, line, True
                continue
            if fence.group(1) == fence_marker:
                in_fence = False
                yield index, line, True
                continue
        yield index, line, in_fence


def iter_body_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (line index, line) for lines outside frontmatter and fenced code."""
    skip = frontmatter_line_count(text)
    for index, line, in_code in iter_fenced(text.split("\n")):
        if index >= skip and not in_code:
            yield index, line


def extract_embeds(text: str) -> list[Embed]:
    """Extract all embeds from a note, in document order."""
    embeds: list[Embed] = []
    for index, line in iter_body_lines(text):
        found: list[Embed] = []
        for match in WIKI_EMBED_PATTERN.finditer(line):
            found.append(
                Embed(
                    line=index,
                    column=match.start(),
                    original=match.group(0),
                    link=match.group(1).strip(),
                    kind="wikilink",
                )
            )
        for match in MARKDOWN_EMBED_PATTERN.finditer(line):
            target = match.group(2)
            if target.startswith("<") and target.endswith(">"):
                target = target[1:-1]
            found.append(
                Embed(
                    line=index,
                    column=match.start(),
                    original=match.group(0),
                    link=target.strip(),
                    kind="markdown",
                    alt=match.group(1),
                )
            )
        embeds.extend(sorted(found, key=lambda e: e.column))
    return embeds


def build_markdown_embed(alt: str, target: str) -> str:
    """Render an embed in markdown image syntax."""
    return f"![{alt}]({target})"
