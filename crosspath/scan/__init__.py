"""Document scan passes (content and render modes)."""

from .content import ContentScanResult, scan_content
from .pipeline import LocationConverter, convert_identifier, make_converter
from .render import EmbedNode, RenderedView, render_note, scan_view

__all__ = [
    "ContentScanResult",
    "scan_content",
    "LocationConverter",
    "convert_identifier",
    "make_converter",
    "EmbedNode",
    "RenderedView",
    "render_note",
    "scan_view",
]
