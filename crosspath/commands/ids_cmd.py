"""Ids command - list asset-library items embedded in a note."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from ..engine import CrossPathEngine
from ..library import build_asset_url


def run_ids(engine: CrossPathEngine, note: str) -> int:
    console = Console(highlight=False)

    if not engine.vault.absolute_path(note).is_file():
        Console(stderr=True).print(f"Note not found: {note}", style="red")
        return 1

    ids = engine.list_asset_ids(note)
    if not ids:
        Console(stderr=True).print("[dim]No library items referenced.[/dim]")
        return 0

    for asset_id in ids:
        url = build_asset_url(asset_id)
        location = engine.resolve_library_url(url)
        suffix = f"  {escape(location)}" if location else ""
        console.print(f"{asset_id}  [dim]{url}[/dim]{suffix}")
    return 0
