"""Render command - show how a note's embeds display on this computer."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..engine import CrossPathEngine


def run_render(engine: CrossPathEngine, note: str) -> int:
    """Render a note's embeds and print the resulting view.

    The note on disk is never modified.
    """
    console = Console()

    if not engine.vault.absolute_path(note).is_file():
        Console(stderr=True).print(f"Note not found: {note}", style="red")
        return 1

    view = engine.render_document(note)
    if engine.settings.conversion_mode != "render-only":
        # Explicit render command always shows the corrected targets
        engine.scan_document("render", view)

    if not view.nodes:
        console.print("[dim]No embeds.[/dim]")
        return 0

    table = Table(title=f"Rendered embeds: {note}")
    table.add_column("Line", justify="right")
    table.add_column("Alt")
    table.add_column("Source", overflow="fold")
    table.add_column("Original", overflow="fold", style="dim")

    for node in view.nodes:
        marker = "[green]~[/green] " if view.is_converted(node) else ""
        table.add_row(str(node.line + 1), escape(node.alt), marker + escape(node.src), escape(node.original_src or ""))

    console.print(table)
    console.print(f"[dim]{len(view.converted)} of {len(view.nodes)} embeds converted for display[/dim]")
    return 0
