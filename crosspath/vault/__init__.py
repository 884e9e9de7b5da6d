"""Vault loading and parsing utilities."""

from .loader import Vault, load_vault
from .parser import Embed, build_markdown_embed, extract_embeds, frontmatter_line_count

__all__ = [
    "load_vault",
    "Vault",
    "Embed",
    "extract_embeds",
    "build_markdown_embed",
    "frontmatter_line_count",
]
