import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from crosspath.cli import _auto_detect_vault, cli
from crosspath.commands.paths_cmd import run_decode, run_encode
from crosspath.commands.refs_cmd import parse_exclude
from crosspath.paths.codec import encode_location

FOREIGN = "![cat](file:///Users/alice/Dropbox/img/cat.png)\n"
CONVERTED = "![cat](file:///C:/Users/alice/img/cat.png)\n"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def registered_vault(vault_path: Path, profiles, write_settings) -> Path:
    write_settings(vault_path, profiles)
    return vault_path


def _invoke(runner: CliRunner, vault: Path, *args: str):
    return runner.invoke(
        cli,
        ["--vault", str(vault), "--platform", "windows", "--username", "alice", *args],
        catch_exceptions=False,
    )


def test_run_encode_and_decode(capsys) -> None:
    assert run_encode(r"C:\Users\alice\My Pics\cat.png") == 0
    assert capsys.readouterr().out.strip() == "file:///C:/Users/alice/My%20Pics/cat.png"

    assert run_decode("file:///C%3A/Users/alice/img/cat.png") == 0
    assert capsys.readouterr().out.strip() == "C:/Users/alice/img/cat.png"


def test_translate_command(runner: CliRunner, registered_vault: Path) -> None:
    result = _invoke(runner, registered_vault, "translate", "/Users/alice/Dropbox/img/cat.png")
    assert result.exit_code == 0
    assert "C:/Users/alice/img/cat.png" in result.output


def test_classify_command(runner: CliRunner, registered_vault: Path) -> None:
    result = _invoke(runner, registered_vault, "classify", "/Users/alice/Dropbox/img/cat.png")
    assert result.exit_code == 0
    assert "Studio Mac" in result.output

    result = _invoke(runner, registered_vault, "classify", "/Users/carol/cat.png")
    assert result.exit_code == 1


def test_profile_add_and_list(runner: CliRunner, vault_path: Path) -> None:
    result = _invoke(
        runner, vault_path, "profile", "add", "Studio Mac", "--platform", "darwin", "--username", "alice", "--sub-path", "Dropbox", "--id", "A"
    )
    assert result.exit_code == 0

    data = json.loads((vault_path / ".crosspath" / "settings.json").read_text(encoding="utf-8"))
    assert data["computers"][0]["platform"] == "macos"

    result = _invoke(runner, vault_path, "profile", "list")
    assert result.exit_code == 0
    assert "Studio Mac" in result.output


def test_profile_register_and_whoami(runner: CliRunner, vault_path: Path) -> None:
    result = _invoke(runner, vault_path, "profile", "whoami")
    assert result.exit_code == 1

    result = _invoke(runner, vault_path, "profile", "register", "Office PC")
    assert result.exit_code == 0

    result = _invoke(runner, vault_path, "profile", "register", "Office PC")
    assert result.exit_code == 1

    result = _invoke(runner, vault_path, "profile", "whoami")
    assert result.exit_code == 0
    assert "Office PC" in result.output


def test_profile_remove_unknown(runner: CliRunner, registered_vault: Path) -> None:
    result = _invoke(runner, registered_vault, "profile", "remove", "nope")
    assert result.exit_code == 1


def test_convert_dry_run_and_apply(runner: CliRunner, registered_vault: Path, write_note) -> None:
    note = write_note(registered_vault, "note.md", FOREIGN)

    result = _invoke(runner, registered_vault, "convert", "note.md", "--dry-run")
    assert result.exit_code == 0
    assert "DRY RUN" in result.output
    assert note.read_text(encoding="utf-8") == FOREIGN

    result = _invoke(runner, registered_vault, "convert", "note.md")
    assert result.exit_code == 0
    assert note.read_text(encoding="utf-8") == CONVERTED

    result = _invoke(runner, registered_vault, "log")
    assert "convert-content" in result.output


def test_convert_requires_note_or_all(runner: CliRunner, registered_vault: Path) -> None:
    result = runner.invoke(cli, ["--vault", str(registered_vault), "convert"])
    assert result.exit_code == 2


def test_convert_all(runner: CliRunner, registered_vault: Path, write_note) -> None:
    a = write_note(registered_vault, "a.md", FOREIGN)
    b = write_note(registered_vault, "nested/b.md", FOREIGN)

    result = _invoke(runner, registered_vault, "convert", "--all")

    assert result.exit_code == 0
    assert a.read_text(encoding="utf-8") == CONVERTED
    assert b.read_text(encoding="utf-8") == CONVERTED


def test_render_does_not_write(runner: CliRunner, registered_vault: Path, write_note) -> None:
    note = write_note(registered_vault, "note.md", FOREIGN)
    result = _invoke(runner, registered_vault, "render", "note.md")
    assert result.exit_code == 0
    assert "1 of 1 embeds converted" in result.output
    assert note.read_text(encoding="utf-8") == FOREIGN


def test_refs_replace(runner: CliRunner, registered_vault: Path, write_note) -> None:
    (registered_vault / "cat.png").write_bytes(b"\x89PNG")
    active = write_note(registered_vault, "active.md", "![[cat.png]]\n")
    other = write_note(registered_vault, "other.md", "see ![[cat.png]]\n")

    result = _invoke(runner, registered_vault, "refs", "cat.png")
    assert result.exit_code == 0
    assert "other.md" in result.output

    result = _invoke(
        runner,
        registered_vault,
        "refs",
        "cat.png",
        "--replace-with",
        "file:///C:/Users/alice/img/cat.png",
        "--exclude",
        "active.md:1:0",
        "--yes",
    )
    assert result.exit_code == 0
    assert active.read_text(encoding="utf-8") == "![[cat.png]]\n"
    assert other.read_text(encoding="utf-8") == "see ![cat](file:///C:/Users/alice/img/cat.png)\n"


def test_refs_missing_asset(runner: CliRunner, registered_vault: Path) -> None:
    result = _invoke(runner, registered_vault, "refs", "missing.png")
    assert result.exit_code == 1


def test_refs_bad_exclude(runner: CliRunner, registered_vault: Path) -> None:
    result = runner.invoke(cli, ["--vault", str(registered_vault), "refs", "x.png", "--exclude", "nope"])
    assert result.exit_code == 2


def test_parse_exclude() -> None:
    position = parse_exclude(r"notes\daily.md:12:4")
    assert (position.document_id, position.line_index, position.column_offset) == ("notes/daily.md", 11, 4)
    with pytest.raises(ValueError):
        parse_exclude("daily.md:0:4")


def test_ids_command(runner: CliRunner, registered_vault: Path, write_note) -> None:
    write_note(registered_vault, "note.md", "![x](eagle://item/KQ2ZT7)\n")
    result = _invoke(runner, registered_vault, "ids", "note.md")
    assert result.exit_code == 0
    assert "KQ2ZT7" in result.output


def test_auto_detect_vault(vault_path: Path) -> None:
    nested = vault_path / "notes" / "deep"
    nested.mkdir(parents=True)
    assert _auto_detect_vault(nested) == vault_path.resolve()


def test_malformed_settings_reported(runner: CliRunner, vault_path: Path) -> None:
    state = vault_path / ".crosspath"
    state.mkdir()
    (state / "settings.json").write_text("{broken", encoding="utf-8")
    result = runner.invoke(cli, ["--vault", str(vault_path), "profile", "list"])
    assert result.exit_code == 1
    assert "Failed to parse settings" in result.output


def test_incomplete_profile_record_reported(runner: CliRunner, vault_path: Path) -> None:
    state = vault_path / ".crosspath"
    state.mkdir(exist_ok=True)
    (state / "settings.json").write_text(json.dumps({"computers": [{"platform": "macos"}]}), encoding="utf-8")

    result = _invoke(runner, vault_path, "profile", "list")
    assert result.exit_code == 1
    assert "Malformed computer profile" in result.output


def test_refs_replace_with_library_item(
    runner: CliRunner, vault_path: Path, profiles, write_settings, write_note, asset_library: Path
) -> None:
    write_settings(vault_path, profiles, assetLibraryPath=str(asset_library))
    (vault_path / "cat.png").write_bytes(b"\x89PNG")
    other = write_note(vault_path, "other.md", "see ![[cat.png]]\n")

    result = _invoke(runner, vault_path, "refs", "cat.png", "--replace-with", "eagle://item/KQ2ZT7", "--yes")

    assert result.exit_code == 0
    location = encode_location((asset_library / "images" / "KQ2ZT7.info" / "cat.png").resolve().as_posix())
    assert other.read_text(encoding="utf-8") == f"see ![cat]({location})\n"


def test_refs_replace_with_unknown_library_item(runner: CliRunner, registered_vault: Path, write_note) -> None:
    (registered_vault / "cat.png").write_bytes(b"\x89PNG")
    other = write_note(registered_vault, "other.md", "see ![[cat.png]]\n")

    result = _invoke(runner, registered_vault, "refs", "cat.png", "--replace-with", "eagle://item/NOPE1", "--yes")

    assert result.exit_code == 1
    assert other.read_text(encoding="utf-8") == "see ![[cat.png]]\n"
