"""
Cross-platform path translation and reference consistency engine.

``CrossPathEngine`` wires the profile registry, the vault document store,
the scan passes, and the reference rewriter together. It is driven by
document lifecycle events (open, render) and explicit commands.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, overload

from .audit_log import CreationSummary, ErasureCost
from .config import Settings, SettingsStore
from .confirm import ConfirmationPort, StaticConfirmation
from .errors import PersistenceFailure
from .identity import detect_live_identity
from .library import AssetLibrary, LibraryFolder, extract_asset_ids, item_file_location
from .models import ComputerProfile, DocumentHits, ExcludePosition, LiveIdentity, Platform
from .notices import Notifier, NullNotifier, plural
from .paths.classifier import classify
from .paths.codec import decode_location, encode_location
from .paths.translator import Translation, translate_detailed
from .planning import ConversionPlan, ConversionResult, ReferenceRewriteResult
from .profiles.registry import ComputerProfileRegistry
from .references.indexer import ReferenceIndexer
from .references.rewriter import ReferenceRewriter
from .scan.content import ContentScanResult, scan_content
from .scan.pipeline import LocationConverter, make_converter
from .scan.render import RenderedView, render_note, scan_view
from .vault.loader import Vault, load_vault

logger = logging.getLogger(__name__)

ScanMode = Literal["content", "render"]


class CrossPathEngine:
    """Facade over classification, translation, scanning, and reference rewriting."""

    def __init__(
        self,
        vault: Vault,
        registry: ComputerProfileRegistry,
        live: LiveIdentity,
        confirmation: ConfirmationPort | None = None,
        notifier: Notifier | None = None,
        audit: bool = True,
        library: AssetLibrary | None = None,
    ):
        self.vault = vault
        self.registry = registry
        self.live = live
        self.confirmation = confirmation or StaticConfirmation(False)
        self.notifier = notifier or NullNotifier()
        self.audit = audit
        self.last_mutated_document: str | None = None
        self._library = library

    @classmethod
    def open(
        cls,
        vault_path: Path,
        platform: Platform | None = None,
        username: str | None = None,
        confirmation: ConfirmationPort | None = None,
        notifier: Notifier | None = None,
    ) -> "CrossPathEngine":
        """Load the vault, its settings blob and the live identity.

        Raises:
            FileNotFoundError: If the vault directory does not exist
            ValueError: If the settings blob or defaults file is malformed
        """
        vault = load_vault(vault_path)
        live = detect_live_identity(vault_path.resolve(), platform=platform, username=username)
        notifier = notifier or NullNotifier()
        registry = ComputerProfileRegistry.load(SettingsStore.for_vault(vault_path), live=live, notifier=notifier)
        return cls(vault, registry, live, confirmation=confirmation, notifier=notifier)

    @property
    def settings(self) -> Settings:
        return self.registry.settings

    @property
    def profiles(self) -> list[ComputerProfile]:
        if not self.settings.enable_cross_platform:
            return []
        return self.registry.list()

    @property
    def library(self) -> AssetLibrary | None:
        """Asset library configured for this vault, if any."""
        if self._library is not None:
            return self._library
        if not self.settings.asset_library_path:
            return None
        path = Path(self.settings.asset_library_path).expanduser()
        if not path.is_absolute():
            path = self.vault.path / path
        return LibraryFolder(path)

    # -- single-path operations -------------------------------------------

    def classify(self, path: str) -> ComputerProfile | None:
        return classify(path, self.profiles, self.live)

    def translate(self, path: str) -> str:
        return self.translate_detailed(path).path

    def translate_detailed(self, path: str) -> Translation:
        return translate_detailed(path, self.profiles, self.live)

    @staticmethod
    def encode_location(path: str) -> str:
        return encode_location(path)

    @staticmethod
    def decode_location(identifier: str) -> str:
        return decode_location(identifier)

    def converter(self) -> LocationConverter:
        return make_converter(self.profiles, self.live)

    # -- scan passes --------------------------------------------------------

    @overload
    def scan_document(self, mode: Literal["content"], target: str) -> ContentScanResult: ...

    @overload
    def scan_document(self, mode: Literal["render"], target: RenderedView) -> int: ...

    def scan_document(self, mode: ScanMode, target: str | RenderedView) -> ContentScanResult | int:
        """Run one scan pass.

        Content mode takes note text and returns the rewritten text with a
        count; render mode mutates the view in place and returns the count.
        """
        if mode == "content":
            if not isinstance(target, str):
                raise TypeError("content mode scans note text")
            return scan_content(target, self.converter())
        if mode == "render":
            if not isinstance(target, RenderedView):
                raise TypeError("render mode scans a RenderedView")
            return scan_view(target, self.converter())
        raise ValueError(f"Unknown scan mode: {mode!r}")

    def compute_conversion(self, document_id: str) -> ConversionPlan:
        """Diagnostic phase of a content-mode conversion."""
        text = self.vault.read_document(document_id)
        scanned = scan_content(text, self.converter())
        return ConversionPlan(
            vault_path=self.vault.path,
            document_id=document_id,
            original_text=text,
            updated_text=scanned.text,
            converted_count=scanned.converted_count,
        )

    def execute_conversion(self, plan: ConversionPlan, operation: str = "convert-content") -> ConversionResult:
        """Action phase: write the converted note and remember we wrote it."""
        if not plan.changed:
            return ConversionResult(document_id=plan.document_id)

        try:
            self.vault.write_document(plan.document_id, plan.updated_text)
        except PersistenceFailure as e:
            self.notifier.notify(str(e), style="red")
            return ConversionResult(document_id=plan.document_id, success=False, error=str(e))

        self.last_mutated_document = plan.document_id
        result = ConversionResult(
            erased=ErasureCost(
                files=1,
                references=plan.converted_count,
                bytes_erased=len(plan.original_text.encode("utf-8")),
            ),
            created=CreationSummary(
                files=1,
                references=plan.converted_count,
                bytes_written=len(plan.updated_text.encode("utf-8")),
            ),
            document_id=plan.document_id,
            converted_count=plan.converted_count,
            written=True,
        )
        if self.audit:
            result.log_to_audit(self.vault.path, operation, {"document": plan.document_id})
        return result

    def convert_document(self, document_id: str) -> ConversionResult:
        """Explicit "convert this note" command."""
        if not self.settings.enable_cross_platform:
            self.notifier.notify("Cross-platform conversion is disabled in settings", style="yellow")
            return ConversionResult(document_id=document_id)

        result = self.execute_conversion(self.compute_conversion(document_id))
        if result.written:
            self.notifier.notify(f"Converted {plural(result.converted_count, 'cross-platform image path')}", style="green")
        elif result.success:
            self.notifier.notify("No cross-platform paths found to convert", style="dim")
        return result

    def convert_all(self) -> list[ConversionResult]:
        """Content-mode conversion of every note; returns results for notes written or failed."""
        results = []
        self.vault.refresh()
        for document_id in self.vault.list_documents():
            try:
                plan = self.compute_conversion(document_id)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", document_id, e)
                continue
            result = self.execute_conversion(plan)
            if result.written or not result.success:
                results.append(result)
        return results

    def on_document_open(self, document_id: str) -> ConversionResult | None:
        """Opportunistic conversion when a note is opened.

        The open that immediately follows our own write of the same note is
        skipped; any open clears the marker.
        """
        just_written = self.last_mutated_document == document_id
        self.last_mutated_document = None

        if not (self.settings.enable_cross_platform and self.settings.auto_convert_on_open):
            return None
        if self.settings.conversion_mode != "content":
            return None
        if just_written:
            logger.debug("Skipping %s - it was just written by us", document_id)
            return None

        result = self.execute_conversion(self.compute_conversion(document_id), operation="auto-convert-content")
        if result.written:
            self.notifier.notify(f"Auto-converted {plural(result.converted_count, 'cross-platform path')}", style="green")
        return result

    def render_document(self, document_id: str, view: RenderedView | None = None) -> RenderedView:
        """Render a note's embeds and, in render-only mode, convert the view."""
        if view is None:
            view = render_note(self.vault, document_id)
        if self.settings.enable_cross_platform and self.settings.conversion_mode == "render-only":
            converted = scan_view(view, self.converter())
            if converted:
                logger.debug("Render-only: converted %d paths in %s", converted, document_id)
        return view

    # -- reference consistency ---------------------------------------------

    def find_references(self, target_id: str) -> list[DocumentHits]:
        self.vault.refresh()
        return ReferenceIndexer(self.vault).find_all(target_id)

    def list_asset_ids(self, document_id: str) -> list[str]:
        """Asset-library item ids embedded in a note."""
        return extract_asset_ids(self.vault.read_document(document_id))

    def resolve_library_url(self, url: str) -> str | None:
        """``file://`` identifier for a library item URL; None if it cannot be resolved."""
        library = self.library
        if library is None:
            return None
        return item_file_location(library, url)

    async def replace_all_references(
        self,
        target_id: str,
        new_identifier: str,
        exclude_position: ExcludePosition | None = None,
    ) -> ReferenceRewriteResult:
        """Point every other embed of ``target_id`` at ``new_identifier``.

        Resolves to an unconfirmed, empty result if the user declines or
        does not answer in time.
        """
        hits = self.find_references(target_id)
        rewriter = ReferenceRewriter(
            self.vault,
            self.confirmation,
            notifier=self.notifier,
            timeout=self.settings.confirm_timeout,
        )
        result = await rewriter.apply(hits, target_id, new_identifier, exclude_position)
        if result.files_changed and self.audit:
            result.log_to_audit(
                self.vault.path,
                "replace-references",
                {
                    "asset": target_id,
                    "new_identifier": new_identifier,
                    "documents": result.changed_documents,
                },
            )
        return result
