"""Path commands - classify, translate and convert single locations."""

from __future__ import annotations

from rich.console import Console

from ..engine import CrossPathEngine
from ..paths.codec import decode_location, encode_location
from ..paths.translator import TranslationStatus

_STATUS_NOTES = {
    TranslationStatus.UNCLASSIFIABLE: "no registered computer produced this path",
    TranslationStatus.NO_CURRENT_PROFILE: "this computer is not registered",
    TranslationStatus.SAME_PROFILE: "path already belongs to this computer",
    TranslationStatus.EXTRACTION_FAILED: "source root not found at the start of the path",
}


def run_classify(engine: CrossPathEngine, path: str) -> int:
    """Print the profile that produced ``path``; exit 1 if none did."""
    console = Console(soft_wrap=True, highlight=False)

    profile = engine.classify(decode_location(path))
    if profile is None:
        Console(stderr=True).print("[dim]Unclassifiable[/dim]")
        return 1

    console.print(f"{profile.display_name} ({profile.platform.value}/{profile.username}) [dim]{profile.id}[/dim]")
    return 0


def run_translate(engine: CrossPathEngine, path: str, as_identifier: bool = False) -> int:
    """Print ``path`` rewritten for this computer (unchanged if no translation applies)."""
    console = Console(soft_wrap=True, highlight=False)
    err = Console(stderr=True)

    translation = engine.translate_detailed(decode_location(path))
    output = encode_location(translation.path) if as_identifier and translation.changed else translation.path
    console.print(output, markup=False)

    if translation.changed:
        err.print(f"[dim]{translation.source.display_name} -> {translation.target.display_name}[/dim]")
    else:
        err.print(f"[dim]Unchanged: {_STATUS_NOTES.get(translation.status, translation.status.value)}[/dim]")
    return 0


def run_encode(path: str) -> int:
    Console(soft_wrap=True, highlight=False).print(encode_location(path), markup=False)
    return 0


def run_decode(identifier: str) -> int:
    Console(soft_wrap=True, highlight=False).print(decode_location(identifier), markup=False)
    return 0
