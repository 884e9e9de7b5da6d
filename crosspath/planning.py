"""
Compute/execute split for document mutations.

Every command that writes notes first computes a plan (pure, no side
effects) and then executes it. Plans can be shown as a dry run; results
carry the erasure/creation accounting written to the audit log.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .audit_log import CreationSummary, ErasureCost, log_operation
from .models import AssetReference, DocumentHits
from .notices import plural


@dataclass
class BasePlan(ABC):
    """Base class for operation plans (diagnostic output)."""
    vault_path: Path

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for operation results (action output)."""
    erased: ErasureCost = field(default_factory=ErasureCost)
    created: CreationSummary = field(default_factory=CreationSummary)
    success: bool = True
    error: str | None = None

    def log_to_audit(self, vault_path: Path, operation: str, metadata: dict[str, Any] | None = None) -> None:
        """Log this result to the audit trail."""
        log_operation(vault_path, operation, self.erased, self.created, metadata or {})


# Document conversion Plan/Result
@dataclass
class ConversionPlan(BasePlan):
    """Plan for converting foreign paths in one note."""
    document_id: str
    original_text: str = ""
    updated_text: str = ""
    converted_count: int = 0

    @property
    def changed(self) -> bool:
        return self.converted_count > 0 and self.updated_text != self.original_text

    def summary(self) -> str:
        lines = [
            "Cross-platform Conversion Plan",
            f"  Note: {self.document_id}",
            f"  Paths to convert: {self.converted_count}",
        ]
        if self.changed:
            before = len(self.original_text.encode("utf-8"))
            after = len(self.updated_text.encode("utf-8"))
            lines.append(f"  Size change: {before} -> {after} bytes")
        return "\n".join(lines)


@dataclass
class ConversionResult(BaseResult):
    """Result of a conversion execution."""
    document_id: str = ""
    converted_count: int = 0
    written: bool = False


# Reference rewrite Plan/Result
@dataclass
class ReferenceRewritePlan(BasePlan):
    """Plan for pointing every other embed of an asset at a new identifier."""
    target_id: str
    new_identifier: str
    replacement: str
    documents: list[DocumentHits] = field(default_factory=list)
    excluded: AssetReference | None = None

    @property
    def hit_count(self) -> int:
        return sum(len(d) for d in self.documents)

    @property
    def file_count(self) -> int:
        return len(self.documents)

    @property
    def empty(self) -> bool:
        return self.hit_count == 0

    def confirmation_message(self) -> str:
        """Question put to the user before anything is written."""
        name = Path(self.target_id).name
        return (
            f'Found {plural(self.hit_count, "other reference")} to "{name}" in {plural(self.file_count, "file")}. '
            f"Replace all with the new link?"
        )

    def summary(self) -> str:
        lines = [
            "Reference Rewrite Plan",
            f"  Asset: {self.target_id}",
            f"  New embed: {self.replacement}",
            f"  References: {self.hit_count} in {plural(self.file_count, 'file')}",
        ]
        if self.excluded is not None:
            ex = self.excluded
            lines.append(f"  Excluded: {ex.document_id}:{ex.line_index + 1}:{ex.column_offset}")
        for doc in self.documents:
            lines.append(f"    {doc.document_id}: {len(doc)}")
        return "\n".join(lines)


@dataclass
class ReferenceRewriteResult(BaseResult):
    """Result of a reference rewrite."""
    confirmed: bool = False
    files_changed: int = 0
    hits_changed: int = 0
    hits_skipped: int = 0
    changed_documents: list[str] = field(default_factory=list)
