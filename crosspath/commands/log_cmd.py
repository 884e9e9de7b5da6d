"""Log command - show the audit trail of writes."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..audit_log import format_audit_entry, read_audit_log


def run_log(vault_path: Path, last_n: int | None = None, output_json: bool = False) -> int:
    """Print audit entries, oldest first. Returns the number shown."""
    console = Console(highlight=False)

    entries = read_audit_log(vault_path, last_n=last_n)
    if not entries:
        console.print("[dim]No operations logged yet.[/dim]")
        return 0

    for entry in entries:
        if output_json:
            console.print(json.dumps(entry.to_dict()), markup=False, soft_wrap=True)
        else:
            console.print(format_audit_entry(entry), markup=False)
            console.print()

    return len(entries)
