"""Refs command - list and rewrite embeds of an asset across the vault."""

from __future__ import annotations

import asyncio

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..confirm import ConfirmationPort, ConsoleConfirmation, StaticConfirmation
from ..engine import CrossPathEngine
from ..library import parse_asset_url
from ..models import ExcludePosition
from ..references.rewriter import target_id_for


def parse_exclude(value: str) -> ExcludePosition:
    """Parse ``NOTE:LINE:COL`` (1-based line, 0-based column).

    Raises:
        ValueError: If the value is not in that form
    """
    try:
        document_id, line, column = value.rsplit(":", 2)
        line_number, column_offset = int(line), int(column)
    except ValueError:
        raise ValueError(f"Expected NOTE:LINE:COL, got {value!r}") from None
    if not document_id or line_number < 1 or column_offset < 0:
        raise ValueError(f"Expected NOTE:LINE:COL, got {value!r}")
    return ExcludePosition(
        document_id=document_id.replace("\\", "/"),
        line_index=line_number - 1,
        column_offset=column_offset,
    )


def _resolve_asset(engine: CrossPathEngine, asset: str) -> str | None:
    """Vault-relative id of an asset given as an id or absolute path; None if absent."""
    try:
        target = target_id_for(engine.vault, asset)
    except ValueError:
        return None
    return target if engine.vault.absolute_path(target).is_file() else None


def run_refs(
    engine: CrossPathEngine,
    asset: str,
    *,
    replace_with: str | None = None,
    exclude: ExcludePosition | None = None,
    yes: bool = False,
    timeout: float | None = None,
    confirmation: ConfirmationPort | None = None,
) -> int:
    """List the embeds of ``asset``, optionally pointing them at a new identifier.

    Args:
        engine: Engine bound to the vault
        asset: Asset path (vault-relative or absolute)
        replace_with: New location identifier for every remaining embed; an
            asset-library item URL is resolved to its original file
        exclude: Embed to leave alone (the one already edited by hand)
        yes: Skip the confirmation prompt
        timeout: Seconds to wait for confirmation before declining

    Returns:
        Exit code
    """
    console = Console()
    err = Console(stderr=True)

    target_id = _resolve_asset(engine, asset)
    if target_id is None:
        err.print(f"Asset not found in vault: {asset}", style="red")
        return 1

    hits = engine.find_references(target_id)
    if not hits:
        console.print(f"[dim]No embeds of {escape(target_id)}.[/dim]")
        return 0

    table = Table(title=f"Embeds of {escape(target_id)}")
    table.add_column("Note")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Embed", overflow="fold")
    for doc in hits:
        for ref in doc.references:
            table.add_row(escape(doc.document_id), str(ref.line_index + 1), str(ref.column_offset), escape(ref.raw_matched_text))
    console.print(table)

    if replace_with is None:
        return 0

    if parse_asset_url(replace_with) is not None:
        location = engine.resolve_library_url(replace_with)
        if location is None:
            err.print(f"Could not resolve {replace_with} to a file in the asset library", style="red")
            return 1
        console.print(f"[dim]{escape(replace_with)} -> {escape(location)}[/dim]")
        replace_with = location

    if timeout is not None:
        engine.settings.confirm_timeout = timeout
    engine.confirmation = confirmation or (StaticConfirmation(True) if yes else ConsoleConfirmation())

    result = asyncio.run(engine.replace_all_references(target_id, replace_with, exclude))

    if not result.confirmed:
        err.print("[dim]No references replaced.[/dim]")
        return 0
    if not result.success:
        err.print(str(result.error), style="red")
        return 1
    if result.hits_skipped:
        err.print(f"[yellow]{result.hits_skipped} references had moved and were left alone[/yellow]")
    return 0
