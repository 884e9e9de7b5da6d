"""CLI entrypoint for crosspath."""

import logging
import sys
from pathlib import Path

import click

from . import __version__

VAULT_MARKERS = (".crosspath", ".obsidian")


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the nearest directory holding a vault marker by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if any((p / marker).is_dir() for marker in VAULT_MARKERS):
            return p
    return None


def _setup_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=verbose,
                log_time_format="%H:%M:%S",
            )
        ],
    )


def _engine(ctx: click.Context):
    """Open the engine for the selected vault (lazily, per command)."""
    from .engine import CrossPathEngine
    from .models import Platform
    from .notices import ConsoleNotifier

    obj = ctx.obj
    if "engine" not in obj:
        platform = Platform.parse(obj["platform"]) if obj["platform"] else None
        try:
            obj["engine"] = CrossPathEngine.open(
                obj["vault"],
                platform=platform,
                username=obj["username"],
                notifier=ConsoleNotifier(),
            )
        except (FileNotFoundError, ValueError) as e:
            raise click.ClickException(str(e)) from e
    return obj["engine"]


def _note_id(ctx: click.Context, note: str) -> str:
    """Accept a note as a vault-relative id or a filesystem path."""
    from .references.rewriter import target_id_for

    engine = _engine(ctx)
    candidate = Path(note)
    if not candidate.is_absolute():
        if engine.vault.absolute_path(note).exists() or not candidate.exists():
            return target_id_for(engine.vault, note)
        candidate = candidate.resolve()
    try:
        return target_id_for(engine.vault, candidate)
    except ValueError:
        raise click.BadParameter(f"{note} is not inside the vault", param_hint="NOTE") from None


@click.group()
@click.version_option(__version__, prog_name="crosspath")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault (defaults to the nearest folder holding .crosspath/ or .obsidian/)",
)
@click.option(
    "--platform",
    type=click.Choice(["macos", "windows", "darwin", "win32"], case_sensitive=False),
    default=None,
    help="Override the detected platform of this computer",
)
@click.option(
    "--username",
    default=None,
    help="Override the username read from the vault's location",
)
@click.option("--verbose", "-V", is_flag=True, help="Log classification and translation decisions")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, platform: str | None, username: str | None, verbose: bool) -> None:
    """crosspath - keep embedded asset paths valid across computers.

    Translates absolute asset paths written on one registered computer into
    the layout of the computer you are on, and rewrites every embed of an
    asset when its location changes.
    """
    ctx.ensure_object(dict)
    _setup_logging(verbose)

    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException("Vault not found. Pass --vault /path/to/vault or run from inside one.")
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()
    ctx.obj["platform"] = platform
    ctx.obj["username"] = username


# -----------------------------------------------------------------------------
# Profile commands
# -----------------------------------------------------------------------------


@cli.group()
def profile() -> None:
    """Manage registered computer profiles."""
    pass


@profile.command("list")
@click.pass_context
def profile_list(ctx: click.Context) -> None:
    """List registered computers (* marks this one)."""
    from .commands.profiles_cmd import run_profile_list

    sys.exit(run_profile_list(_engine(ctx)))


@profile.command("add")
@click.argument("name")
@click.option(
    "--platform",
    "profile_platform",
    type=click.Choice(["macos", "windows", "darwin", "win32"], case_sensitive=False),
    required=True,
    help="Platform of the computer",
)
@click.option("--username", "profile_username", required=True, help="Account name in the home directory path")
@click.option("--sub-path", default="", help="Path between the home directory and the documents root")
@click.option("--id", "profile_id", default=None, help="Profile id (default: generated)")
@click.pass_context
def profile_add(
    ctx: click.Context,
    name: str,
    profile_platform: str,
    profile_username: str,
    sub_path: str,
    profile_id: str | None,
) -> None:
    """Register a computer by hand.

    Examples:

        crosspath profile add "Studio Mac" --platform macos --username alice --sub-path Dropbox
    """
    from .commands.profiles_cmd import run_profile_add

    exit_code = run_profile_add(
        _engine(ctx),
        name,
        profile_platform,
        profile_username,
        sub_path=sub_path,
        profile_id=profile_id,
    )
    sys.exit(exit_code)


@profile.command("register")
@click.argument("name")
@click.option("--sub-path", default="", help="Path between the home directory and the documents root")
@click.pass_context
def profile_register(ctx: click.Context, name: str, sub_path: str) -> None:
    """Register the computer you are on."""
    from .commands.profiles_cmd import run_profile_register

    sys.exit(run_profile_register(_engine(ctx), name, sub_path=sub_path))


@profile.command("remove")
@click.argument("profile_id")
@click.pass_context
def profile_remove(ctx: click.Context, profile_id: str) -> None:
    """Remove a registered computer."""
    from .commands.profiles_cmd import run_profile_remove

    sys.exit(run_profile_remove(_engine(ctx), profile_id))


@profile.command("set-subpath")
@click.argument("profile_id")
@click.argument("sub_path")
@click.pass_context
def profile_set_subpath(ctx: click.Context, profile_id: str, sub_path: str) -> None:
    """Change the sub-path of a registered computer."""
    from .commands.profiles_cmd import run_profile_set_subpath

    sys.exit(run_profile_set_subpath(_engine(ctx), profile_id, sub_path))


@profile.command("whoami")
@click.pass_context
def profile_whoami(ctx: click.Context) -> None:
    """Show this computer's identity and profile."""
    from .commands.profiles_cmd import run_whoami

    sys.exit(run_whoami(_engine(ctx)))


# -----------------------------------------------------------------------------
# Single-path commands
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("path")
@click.pass_context
def classify(ctx: click.Context, path: str) -> None:
    """Name the registered computer that produced PATH."""
    from .commands.paths_cmd import run_classify

    sys.exit(run_classify(_engine(ctx), path))


@cli.command()
@click.argument("path")
@click.option("--identifier", "as_identifier", is_flag=True, help="Print a file:// identifier instead of a path")
@click.pass_context
def translate(ctx: click.Context, path: str, as_identifier: bool) -> None:
    """Rewrite PATH (or a file:// identifier) for this computer.

    Examples:

        crosspath --platform windows --username alice translate /Users/alice/Dropbox/img/cat.png
    """
    from .commands.paths_cmd import run_translate

    sys.exit(run_translate(_engine(ctx), path, as_identifier=as_identifier))


@cli.command()
@click.argument("path")
def encode(path: str) -> None:
    """Turn a filesystem PATH into a file:// identifier."""
    from .commands.paths_cmd import run_encode

    sys.exit(run_encode(path))


@cli.command()
@click.argument("identifier")
def decode(identifier: str) -> None:
    """Turn a location IDENTIFIER into a filesystem path."""
    from .commands.paths_cmd import run_decode

    sys.exit(run_decode(identifier))


# -----------------------------------------------------------------------------
# Document commands
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("note", required=False)
@click.option("--all", "convert_all", is_flag=True, help="Convert every note in the vault")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be done without executing (diagnostic only)",
)
@click.pass_context
def convert(ctx: click.Context, note: str | None, convert_all: bool, dry_run: bool) -> None:
    """Rewrite foreign file:// embeds in NOTE for this computer.

    Examples:

        crosspath convert Journal/2024-05-01.md

        crosspath convert --all --dry-run
    """
    from .commands.convert_cmd import run_convert, run_convert_all

    if convert_all == (note is not None):
        raise click.UsageError("Pass either NOTE or --all")

    engine = _engine(ctx)
    if convert_all:
        sys.exit(run_convert_all(engine, dry_run=dry_run))
    sys.exit(run_convert(engine, _note_id(ctx, note), dry_run=dry_run))


@cli.command()
@click.argument("note")
@click.pass_context
def render(ctx: click.Context, note: str) -> None:
    """Show NOTE's embeds as they display on this computer (no writes)."""
    from .commands.render_cmd import run_render

    sys.exit(run_render(_engine(ctx), _note_id(ctx, note)))


@cli.command()
@click.argument("note")
@click.pass_context
def ids(ctx: click.Context, note: str) -> None:
    """List asset-library item ids embedded in NOTE."""
    from .commands.ids_cmd import run_ids

    sys.exit(run_ids(_engine(ctx), _note_id(ctx, note)))


def _parse_exclude(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None:
        return None
    from .commands.refs_cmd import parse_exclude

    try:
        return parse_exclude(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@cli.command()
@click.argument("asset")
@click.option("--replace-with", default=None, metavar="IDENTIFIER", help="Point every other embed at this identifier")
@click.option(
    "--exclude",
    default=None,
    metavar="NOTE:LINE:COL",
    callback=_parse_exclude,
    help="Embed to leave alone (line is 1-based, column as listed)",
)
@click.option("--yes", "-y", is_flag=True, help="Replace without asking")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for confirmation (default from settings)")
@click.pass_context
def refs(
    ctx: click.Context,
    asset: str,
    replace_with: str | None,
    exclude,
    yes: bool,
    timeout: float | None,
) -> None:
    """List every embed of ASSET, or rewrite them to a new identifier.

    Examples:

        crosspath refs assets/cat.png

        crosspath refs assets/cat.png --replace-with file:///C:/Users/alice/img/cat.png --exclude Daily.md:12:0
    """
    from .commands.refs_cmd import run_refs

    exit_code = run_refs(
        _engine(ctx),
        asset,
        replace_with=replace_with,
        exclude=exclude,
        yes=yes,
        timeout=timeout,
    )
    sys.exit(exit_code)


# -----------------------------------------------------------------------------
# Watch and audit log
# -----------------------------------------------------------------------------


@cli.command()
@click.pass_context
def watch(ctx: click.Context) -> None:
    """Convert foreign paths in notes as they are created or changed.

    Runs until interrupted (Ctrl+C).
    """
    from .commands.watch_cmd import run_watch

    sys.exit(run_watch(_engine(ctx)))


@cli.command("log")
@click.option("--last", "-n", "last_n", type=int, default=None, help="Show only the last N entries")
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON lines")
@click.pass_context
def audit_log(ctx: click.Context, last_n: int | None, output_json: bool) -> None:
    """Show the audit log of writes made by crosspath."""
    from .commands.log_cmd import run_log

    run_log(ctx.obj["vault"], last_n=last_n, output_json=output_json)
    sys.exit(0)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
