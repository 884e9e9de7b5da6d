import asyncio
from pathlib import Path

import pytest

from crosspath.confirm import StaticConfirmation
from crosspath.errors import PersistenceFailure
from crosspath.models import AssetReference, ExcludePosition
from crosspath.notices import RecordingNotifier
from crosspath.references.indexer import ReferenceIndexer
from crosspath.references.rewriter import ReferenceRewriter, apply_hits, target_id_for
from crosspath.vault.loader import Vault, load_vault

NEW_ID = "file:///C:/Users/alice/img/cat.png"
ACTIVE = "Intro\n![old](assets/cat.png)\n"
OTHER = "![[cat.png]]\ntext ![c](assets/cat.png) end\n"


class SlowConfirmation:
    """Never answers in time."""

    def __init__(self) -> None:
        self.asked: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.asked.append(message)
        await asyncio.sleep(10)
        return True


@pytest.fixture
def vault(vault_path: Path, write_note) -> Vault:
    (vault_path / "assets").mkdir()
    (vault_path / "assets" / "cat.png").write_bytes(b"\x89PNG")
    (vault_path / "assets" / "dog.png").write_bytes(b"\x89PNG")
    write_note(vault_path, "active.md", ACTIVE)
    write_note(vault_path, "other.md", OTHER)
    write_note(vault_path, "unrelated.md", "![[dog.png]]\n")
    return load_vault(vault_path)


def _text(vault: Vault, document_id: str) -> str:
    return vault.read_document(document_id)


def test_indexer_finds_all_hits(vault: Vault) -> None:
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")
    assert [h.document_id for h in hits] == ["active.md", "other.md"]
    assert sum(len(h) for h in hits) == 3

    other = hits[1].references
    assert [(r.line_index, r.column_offset) for r in other] == [(0, 0), (1, 5)]
    assert other[0].raw_matched_text == "![[cat.png]]"
    assert all(r.resolved_target_id == "assets/cat.png" for r in other)


def test_indexer_skips_code_blocks(vault: Vault, write_note) -> None:
    write_note(vault.path, "code.md", "```\n![[cat.png]]\n```\n")
    vault.refresh()
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")
    assert "code.md" not in [h.document_id for h in hits]


def test_indexer_skips_frontmatter(vault: Vault, write_note) -> None:
    write_note(vault.path, "meta.md", "---\ncover: ![c](assets/cat.png)\n---\n![[cat.png]]\n")
    vault.refresh()
    hits = {h.document_id: h for h in ReferenceIndexer(vault).find_all("assets/cat.png")}
    assert [r.line_index for r in hits["meta.md"].references] == [3]


@pytest.mark.asyncio
async def test_rewrite_excludes_active_embed(vault: Vault) -> None:
    confirmation = StaticConfirmation(True)
    rewriter = ReferenceRewriter(vault, confirmation)
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")

    result = await rewriter.apply(hits, "assets/cat.png", NEW_ID, ExcludePosition("active.md", 1, 0))

    assert result.confirmed
    assert result.files_changed == 1
    assert result.hits_changed == 2
    assert confirmation.asked == ['Found 2 other references to "cat.png" in 1 file. Replace all with the new link?']
    assert _text(vault, "active.md") == ACTIVE
    assert _text(vault, "other.md") == f"![cat]({NEW_ID})\ntext ![cat]({NEW_ID}) end\n"


@pytest.mark.asyncio
async def test_declined_rewrite_writes_nothing(vault: Vault) -> None:
    rewriter = ReferenceRewriter(vault, StaticConfirmation(False))
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")

    result = await rewriter.apply(hits, "assets/cat.png", NEW_ID)

    assert not result.confirmed
    assert result.files_changed == 0
    assert _text(vault, "active.md") == ACTIVE
    assert _text(vault, "other.md") == OTHER


@pytest.mark.asyncio
async def test_unanswered_confirmation_declines(vault: Vault) -> None:
    confirmation = SlowConfirmation()
    rewriter = ReferenceRewriter(vault, confirmation, timeout=0.05)
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")

    result = await rewriter.apply(hits, "assets/cat.png", NEW_ID)

    assert confirmation.asked
    assert not result.confirmed
    assert _text(vault, "other.md") == OTHER


@pytest.mark.asyncio
async def test_nothing_to_rewrite_asks_nothing(vault: Vault) -> None:
    confirmation = StaticConfirmation(True)
    rewriter = ReferenceRewriter(vault, confirmation)
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")[:1]

    result = await rewriter.apply(hits, "assets/cat.png", NEW_ID, ExcludePosition("active.md", 1, 0))

    assert not result.confirmed
    assert confirmation.asked == []


@pytest.mark.asyncio
async def test_write_failure_stops_run(vault: Vault, monkeypatch: pytest.MonkeyPatch) -> None:
    original_write = vault.write_document

    def failing_write(document_id: str, text: str) -> None:
        if document_id == "other.md":
            raise PersistenceFailure("read-only file system")
        original_write(document_id, text)

    monkeypatch.setattr(vault, "write_document", failing_write)
    notifier = RecordingNotifier()
    rewriter = ReferenceRewriter(vault, StaticConfirmation(True), notifier=notifier)
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")

    result = await rewriter.apply(hits, "assets/cat.png", NEW_ID)

    assert not result.success
    assert result.files_changed == 1
    assert result.changed_documents == ["active.md"]
    assert _text(vault, "active.md") == f"Intro\n![cat]({NEW_ID})\n"
    assert _text(vault, "other.md") == OTHER
    assert any("read-only" in message for message in notifier.messages)


def test_apply_hits_same_line_right_to_left() -> None:
    text = "![a](x.png) ![b](x.png)\n"
    hits = [
        AssetReference("n.md", 0, 0, "![a](x.png)", "x.png"),
        AssetReference("n.md", 0, 12, "![b](x.png)", "x.png"),
    ]
    updated, replaced = apply_hits(text, hits, "![x](file:///C:/Users/alice/x.png)")
    assert replaced == 2
    assert updated == "![x](file:///C:/Users/alice/x.png) ![x](file:///C:/Users/alice/x.png)\n"


def test_apply_hits_skips_moved_text() -> None:
    hits = [AssetReference("n.md", 0, 0, "![a](x.png)", "x.png")]
    updated, replaced = apply_hits("something else\n", hits, "![x](y.png)")
    assert replaced == 0
    assert updated == "something else\n"


def test_plan_summary(vault: Vault) -> None:
    rewriter = ReferenceRewriter(vault, StaticConfirmation(True))
    hits = ReferenceIndexer(vault).find_all("assets/cat.png")
    plan = rewriter.plan(hits, "assets/cat.png", NEW_ID, ExcludePosition("active.md", 1, 0))

    assert plan.hit_count == 2
    assert plan.file_count == 1
    assert plan.excluded is not None
    assert "Excluded: active.md:2:0" in plan.summary()


def test_target_id_for(vault: Vault) -> None:
    assert target_id_for(vault, "assets/cat.png") == "assets/cat.png"
    assert target_id_for(vault, vault.path / "assets" / "cat.png") == "assets/cat.png"
