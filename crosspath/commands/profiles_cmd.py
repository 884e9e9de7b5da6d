"""Profile commands - manage the registry of known computers."""

from __future__ import annotations

import uuid

from rich.console import Console
from rich.table import Table

from ..audit_log import CreationSummary, ErasureCost, log_operation
from ..engine import CrossPathEngine
from ..errors import DuplicateIdentity, UnknownProfile
from ..models import ComputerProfile, Platform


def _log_registry_change(engine: CrossPathEngine, operation: str, profile: ComputerProfile) -> None:
    log_operation(
        engine.vault.path,
        operation=operation,
        erased=ErasureCost(),
        created=CreationSummary(),
        metadata={
            "profile": profile.id,
            "display_name": profile.display_name,
            "platform": profile.platform.value,
            "username": profile.username,
            "sub_path": profile.sub_path,
        },
    )


def run_profile_list(engine: CrossPathEngine) -> int:
    """Print registered profiles in registration order."""
    console = Console()
    profiles = engine.registry.list()

    if not profiles:
        console.print("[dim]No computer profiles registered.[/dim]")
        return 0

    table = Table(title="Computer Profiles")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Platform")
    table.add_column("Username")
    table.add_column("Sub-path")

    for profile in profiles:
        marker = "*" if profile.is_current(engine.live) else ""
        table.add_row(
            marker,
            profile.id,
            profile.display_name,
            profile.platform.value,
            profile.username,
            profile.sub_path or "[dim]-[/dim]",
        )

    console.print(table)
    return 0


def run_profile_add(
    engine: CrossPathEngine,
    display_name: str,
    platform: str,
    username: str,
    sub_path: str = "",
    profile_id: str | None = None,
) -> int:
    """Register a profile for any computer."""
    console = Console(stderr=True)

    try:
        parsed = Platform.parse(platform)
    except ValueError:
        console.print(f"Unknown platform: {platform}", style="red")
        return 1

    profile = ComputerProfile(
        id=profile_id or uuid.uuid4().hex[:12],
        display_name=display_name,
        platform=parsed,
        username=username.strip(),
        sub_path=sub_path.strip(),
    )
    if not profile.username:
        console.print("Username must not be empty", style="red")
        return 1

    try:
        saved = engine.registry.add(profile)
    except DuplicateIdentity as e:
        console.print(str(e), style="yellow")
        return 1
    if not saved:
        return 1

    _log_registry_change(engine, "profile-add", profile)
    console.print(f"Added {profile.display_name} ({profile.platform.value}/{profile.username}) as {profile.id}", style="green")
    return 0


def run_profile_register(engine: CrossPathEngine, display_name: str, sub_path: str = "") -> int:
    """Register the computer this command runs on."""
    console = Console(stderr=True)

    try:
        profile = engine.registry.register_current(display_name, sub_path=sub_path.strip())
    except (ValueError, DuplicateIdentity) as e:
        console.print(str(e), style="yellow")
        return 1

    if profile is None:
        return 1

    _log_registry_change(engine, "profile-register", profile)
    console.print(f"Registered this computer as {profile.display_name} ({profile.id})", style="green")
    return 0


def run_profile_remove(engine: CrossPathEngine, profile_id: str) -> int:
    console = Console(stderr=True)

    try:
        profile = engine.registry.get(profile_id)
    except UnknownProfile as e:
        console.print(str(e), style="red")
        return 1

    if not engine.registry.remove(profile_id):
        return 1

    _log_registry_change(engine, "profile-remove", profile)
    console.print(f"Removed {profile.display_name}", style="green")
    return 0


def run_profile_set_subpath(engine: CrossPathEngine, profile_id: str, sub_path: str) -> int:
    console = Console(stderr=True)

    try:
        saved = engine.registry.update_sub_path(profile_id, sub_path)
    except UnknownProfile as e:
        console.print(str(e), style="red")
        return 1
    if not saved:
        return 1

    profile = engine.registry.get(profile_id)
    _log_registry_change(engine, "profile-set-subpath", profile)
    console.print(f"Sub-path of {profile.display_name} set to {profile.sub_path or '(none)'}", style="green")
    return 0


def run_whoami(engine: CrossPathEngine) -> int:
    """Show the live identity and the profile it maps to."""
    console = Console()
    live = engine.live

    platform = live.platform.value if live.platform else "unsupported"
    console.print(f"[bold]Platform:[/bold] {platform}")
    console.print(f"[bold]Username:[/bold] {live.username or '[dim](unknown)[/dim]'}")

    current = engine.registry.current()
    if current is None:
        console.print("[yellow]This computer is not registered.[/yellow]")
        return 1

    console.print(f"[bold]Profile:[/bold] {current.display_name} ({current.id})")
    return 0
