"""
Rewrite the other references to an asset once its identifier changes.

The user confirms first (with a bounded wait that defaults to decline).
Documents are then rewritten one at a time; within a document hits are
applied from the last position to the first so earlier offsets stay valid.
A write failure stops the run: documents already written stay written.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from ..audit_log import CreationSummary, ErasureCost
from ..confirm import DEFAULT_TIMEOUT_SECONDS, ConfirmationPort, confirm_with_timeout
from ..errors import PersistenceFailure
from ..models import AssetReference, DocumentHits, ExcludePosition
from ..notices import Notifier, NullNotifier, plural
from ..planning import ReferenceRewritePlan, ReferenceRewriteResult
from ..vault.loader import Vault
from ..vault.parser import build_markdown_embed

logger = logging.getLogger(__name__)


def apply_hits(text: str, hits: list[AssetReference], replacement: str) -> tuple[str, int]:
    """Replace each hit's raw text with ``replacement``; returns (text, replaced).

    A hit whose raw text is no longer at or after its recorded column on
    its line is left alone.
    """
    lines = text.split("\n")
    replaced = 0
    for hit in sorted(hits, key=lambda h: (h.line_index, h.column_offset), reverse=True):
        if hit.line_index >= len(lines):
            logger.warning("Line %d gone from %s, skipping", hit.line_index + 1, hit.document_id)
            continue
        line = lines[hit.line_index]
        index = line.find(hit.raw_matched_text, hit.column_offset)
        if index == -1:
            logger.warning("Reference %r moved in %s, skipping", hit.raw_matched_text, hit.document_id)
            continue
        lines[hit.line_index] = line[:index] + replacement + line[index + len(hit.raw_matched_text):]
        replaced += 1
    return "\n".join(lines), replaced


class ReferenceRewriter:
    """Confirm-then-mutate rewrite of asset references across notes."""

    def __init__(
        self,
        vault: Vault,
        confirmation: ConfirmationPort,
        notifier: Notifier | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.vault = vault
        self.confirmation = confirmation
        self.notifier = notifier or NullNotifier()
        self.timeout = timeout

    def plan(
        self,
        hits: list[DocumentHits],
        target_id: str,
        new_identifier: str,
        exclude_position: ExcludePosition | None = None,
    ) -> ReferenceRewritePlan:
        """Drop the excluded hit and build the rewrite plan (no side effects)."""
        documents: list[DocumentHits] = []
        excluded: AssetReference | None = None
        for doc in hits:
            kept = []
            for ref in doc.references:
                if excluded is None and exclude_position is not None and exclude_position.matches(ref):
                    excluded = ref
                    continue
                kept.append(ref)
            if kept:
                documents.append(DocumentHits(document_id=doc.document_id, references=kept))

        return ReferenceRewritePlan(
            vault_path=self.vault.path,
            target_id=target_id,
            new_identifier=new_identifier,
            replacement=build_markdown_embed(PurePosixPath(target_id).stem, new_identifier),
            documents=documents,
            excluded=excluded,
        )

    async def apply(
        self,
        hits: list[DocumentHits],
        target_id: str,
        new_identifier: str,
        exclude_position: ExcludePosition | None = None,
    ) -> ReferenceRewriteResult:
        """Confirm with the user, then rewrite every remaining hit."""
        plan = self.plan(hits, target_id, new_identifier, exclude_position)
        if plan.empty:
            return ReferenceRewriteResult(confirmed=False)

        confirmed = await confirm_with_timeout(self.confirmation, plan.confirmation_message(), self.timeout)
        if not confirmed:
            logger.info("Rewrite of %d references to %s declined", plan.hit_count, target_id)
            return ReferenceRewriteResult(confirmed=False)

        result = self.execute(plan)
        if result.success and result.hits_changed:
            self.notifier.notify(
                f"Replaced {plural(result.hits_changed, 'reference')} in {plural(result.files_changed, 'file')}",
                style="green",
            )
        return result

    def execute(self, plan: ReferenceRewritePlan) -> ReferenceRewriteResult:
        """Write the plan's changes, one document at a time."""
        result = ReferenceRewriteResult(confirmed=True, erased=ErasureCost(), created=CreationSummary())

        for doc in plan.documents:
            try:
                original = self.vault.read_document(doc.document_id)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", doc.document_id, e)
                result.hits_skipped += len(doc)
                continue

            updated, replaced = apply_hits(original, doc.references, plan.replacement)
            result.hits_skipped += len(doc) - replaced
            if replaced == 0:
                continue

            try:
                self.vault.write_document(doc.document_id, updated)
            except PersistenceFailure as e:
                result.success = False
                result.error = str(e)
                self.notifier.notify(f"Stopped after {plural(result.files_changed, 'file')}: {e}", style="red")
                break

            result.files_changed += 1
            result.hits_changed += replaced
            result.changed_documents.append(doc.document_id)
            result.erased.files += 1
            result.erased.references += replaced
            result.erased.bytes_erased += len(original.encode("utf-8"))
            result.created.files += 1
            result.created.references += replaced
            result.created.bytes_written += len(updated.encode("utf-8"))

        return result


def target_id_for(vault: Vault, asset: str | Path) -> str:
    """Vault-relative id for an asset given as an id or filesystem path."""
    if isinstance(asset, Path) or Path(asset).is_absolute():
        return vault.document_id(Path(asset))
    return PurePosixPath(str(asset).replace("\\", "/")).as_posix()
