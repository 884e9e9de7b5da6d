"""Watch command - auto-convert notes as they are opened or changed."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console

from ..engine import CrossPathEngine
from ..notices import plural
from ..watcher import run_watch_loop


def run_watch(engine: CrossPathEngine) -> int:
    """
    Watch the vault and convert foreign paths in notes as they change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    Auto-conversion is forced on for the session; the conversion mode
    must be ``content``.
    """
    console = Console(stderr=True)

    if engine.settings.conversion_mode != "content":
        console.print("Watching only converts in content mode; current mode is render-only.", style="yellow")
        return 1
    if engine.registry.current() is None:
        console.print("[yellow]This computer is not registered; nothing will be converted.[/yellow]")

    engine.settings.auto_convert_on_open = True

    console.print(f"[bold]Watching[/bold] {engine.vault.path}")
    console.print(f"  Profiles: {len(engine.registry)}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    converted = 0

    def on_event(formatted: str) -> None:
        nonlocal converted
        converted += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {formatted}", highlight=False)

    try:
        run_watch_loop(engine, on_event=on_event)
    except KeyboardInterrupt:
        pass

    console.print()
    console.print(f"[bold]Stopped.[/bold] Converted {plural(converted, 'note')}.")
    return 0
