"""Find every embed across the vault that resolves to a given asset."""

import logging

from ..models import AssetReference, DocumentHits
from ..vault.loader import Vault
from ..vault.parser import extract_embeds

logger = logging.getLogger(__name__)


class ReferenceIndexer:
    """Scans all notes for embeds of one asset, using the vault's link resolution."""

    def __init__(self, vault: Vault):
        self.vault = vault

    def find_in_document(self, document_id: str, target_id: str, text: str | None = None) -> list[AssetReference]:
        if text is None:
            text = self.vault.read_document(document_id)
        hits = []
        for embed in extract_embeds(text):
            resolved = self.vault.resolve_embed_target(embed.link, document_id)
            if resolved is not None and resolved == target_id:
                hits.append(
                    AssetReference(
                        document_id=document_id,
                        line_index=embed.line,
                        column_offset=embed.column,
                        raw_matched_text=embed.original,
                        resolved_target_id=resolved,
                    )
                )
        return hits

    def find_all(self, target_id: str) -> list[DocumentHits]:
        """Per-document hits for ``target_id`` (a vault-relative asset id).

        Notes that cannot be read are skipped with a warning.
        """
        results = []
        for document_id in self.vault.list_documents():
            try:
                hits = self.find_in_document(document_id, target_id)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", document_id, e)
                continue
            if hits:
                results.append(DocumentHits(document_id=document_id, references=hits))
        logger.debug("Found %d documents referencing %s", len(results), target_id)
        return results
