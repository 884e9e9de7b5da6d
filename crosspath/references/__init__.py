"""Cross-document reference indexing and rewriting."""

from .indexer import ReferenceIndexer
from .rewriter import ReferenceRewriter, apply_hits, target_id_for

__all__ = ["ReferenceIndexer", "ReferenceRewriter", "apply_hits", "target_id_for"]
