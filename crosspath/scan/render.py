"""Render-mode scan: rewrite display targets of a rendered view only.

A ``RenderedView`` holds one node per embed in a note. Conversion changes
``node.src`` and records the node in ``view.converted``; the note on disk
is never touched. Converted nodes are skipped on later passes over the
same view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..paths.codec import encode_location
from ..vault.loader import Vault
from ..vault.parser import extract_embeds
from .pipeline import LocationConverter

logger = logging.getLogger(__name__)

CONVERTED_ATTR = "data-xplatform-converted"
ORIGINAL_SRC_ATTR = "data-original-src"
APP_HOST = "local"


@dataclass
class EmbedNode:
    """A rendered embed: what the viewer will load, plus its markup attributes."""

    index: int
    line: int
    src: str
    alt: str = ""
    original_src: str | None = None
    attrs: dict[str, str] = field(default_factory=dict)


@dataclass
class RenderedView:
    """Arena of embed nodes for one rendering of one note."""

    document_id: str
    nodes: list[EmbedNode] = field(default_factory=list)
    converted: set[int] = field(default_factory=set)

    def is_converted(self, node: EmbedNode) -> bool:
        return node.index in self.converted

    def mark_converted(self, node: EmbedNode, new_src: str) -> None:
        node.original_src = node.src
        node.attrs[ORIGINAL_SRC_ATTR] = node.src
        node.attrs[CONVERTED_ATTR] = "true"
        node.src = new_src
        self.converted.add(node.index)


def resource_url(absolute_path: str, host: str = APP_HOST) -> str:
    """Host render URL for a file inside the vault."""
    encoded = encode_location(absolute_path)[len("file://"):]
    return f"app://{host}/{encoded.lstrip('/')}"


def render_note(vault: Vault, document_id: str, text: str | None = None) -> RenderedView:
    """Build the rendered view of a note's embeds."""
    if text is None:
        text = vault.read_document(document_id)

    view = RenderedView(document_id=document_id)
    for embed in extract_embeds(text):
        target = vault.resolve_embed_target(embed.link, document_id)
        if target is not None:
            src = resource_url(vault.absolute_path(target).resolve().as_posix())
        else:
            src = embed.link
        view.nodes.append(EmbedNode(index=len(view.nodes), line=embed.line, src=src, alt=embed.alt))
    return view


def scan_view(view: RenderedView, converter: LocationConverter) -> int:
    """Convert foreign display targets in ``view``; returns the number converted."""
    converted = 0
    for node in view.nodes:
        if view.is_converted(node) or not node.src:
            continue
        new_src = converter(node.src)
        if new_src is None:
            continue
        logger.debug("Render: node %d %s -> %s", node.index, node.src[:60], new_src[:60])
        view.mark_converted(node, new_src)
        converted += 1
    return converted
