"""Convert command - rewrite foreign file:// embeds in note content."""

from __future__ import annotations

from rich.console import Console
from rich.syntax import Syntax

from ..engine import CrossPathEngine
from ..notices import plural


def run_convert(engine: CrossPathEngine, note: str, dry_run: bool = False) -> int:
    """Convert one note.

    Args:
        engine: Engine bound to the vault
        note: Vault-relative note id
        dry_run: If True, show what would change without writing

    Returns:
        Exit code
    """
    console = Console(stderr=True)

    if not engine.vault.absolute_path(note).is_file():
        console.print(f"Note not found: {note}", style="red")
        return 1

    # Phase 1: Compute (diagnostic) - pure, no side effects
    plan = engine.compute_conversion(note)

    if dry_run:
        console.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        console.print(plan.summary())
        if plan.changed:
            changed = [
                line
                for before, line in zip(plan.original_text.split("\n"), plan.updated_text.split("\n"))
                if before != line
            ]
            console.print("\n[dim]Converted lines:[/dim]")
            console.print(Syntax("\n".join(changed), "markdown", word_wrap=True))
        return 0

    # Phase 2: Execute (action) - performs writes
    result = engine.convert_document(note)
    if not result.success:
        console.print(str(result.error), style="red")
        return 1
    return 0


def run_convert_all(engine: CrossPathEngine, dry_run: bool = False) -> int:
    """Convert every note in the vault."""
    console = Console(stderr=True)

    if dry_run:
        console.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        total = 0
        for document_id in engine.vault.list_documents():
            plan = engine.compute_conversion(document_id)
            if plan.changed:
                total += plan.converted_count
                console.print(f"  {document_id}: {plan.converted_count}")
        console.print(f"\n{total} paths would be converted")
        return 0

    results = engine.convert_all()
    failed = [r for r in results if not r.success]
    written = [r for r in results if r.written]

    for result in written:
        console.print(f"  [green]~[/green] {result.document_id}: {result.converted_count}")
    for result in failed:
        console.print(f"  [red]![/red] {result.document_id}: {result.error}")

    converted = sum(r.converted_count for r in written)
    if written:
        console.print(f"Converted {plural(converted, 'cross-platform path')} in {plural(len(written), 'note')}", style="green")
    else:
        console.print("[dim]No cross-platform paths found to convert[/dim]")
    return 1 if failed else 0
