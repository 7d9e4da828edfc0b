"""Tests for the local index store."""
from datetime import UTC, datetime
from pathlib import Path

from uuid6 import uuid7

from index_client.models import IndexEntry, IndexState
from index_client.store import IndexStore


def make_entry(title: str = "Example") -> IndexEntry:
    return IndexEntry(
        id=uuid7(),
        created_at=datetime.now(UTC),
        title=title,
        url="https://example.com",
        domain="example.com",
        owner=uuid7(),
        tags=["python"],
        is_public=False,
        outdated=False,
    )


def test__load__missing_file_returns_none(tmp_path: Path) -> None:
    assert IndexStore(tmp_path / "index.json").load() is None


def test__load__corrupt_file_returns_none(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    path.write_text("{not json", encoding="utf-8")
    assert IndexStore(path).load() is None


def test__load__other_format_version_returns_none(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    path.write_text('{"version": 999, "entries": [], "cursor": null}', encoding="utf-8")
    assert IndexStore(path).load() is None


def test__save_and_load(tmp_path: Path) -> None:
    store = IndexStore(tmp_path / "nested" / "index.json")
    state = IndexState(
        entries=[make_entry("One"), make_entry("Two")],
        cursor=uuid7(),
        last_synced_at=datetime.now(UTC),
    )

    store.save(state)

    assert store.load() == state


def test__save__writes_camel_case_json(tmp_path: Path) -> None:
    store = IndexStore(tmp_path / "index.json")
    store.save(IndexState(entries=[make_entry()], cursor=uuid7()))

    raw = store.path.read_text(encoding="utf-8")
    assert '"isPublic"' in raw
    assert '"lastSyncedAt"' in raw


def test__save__replaces_existing_and_leaves_no_temp_files(tmp_path: Path) -> None:
    store = IndexStore(tmp_path / "index.json")
    store.save(IndexState(entries=[make_entry("Old")]))
    new_state = IndexState(entries=[make_entry("New")], cursor=uuid7())

    store.save(new_state)

    assert store.load() == new_state
    assert [p.name for p in tmp_path.iterdir()] == ["index.json"]


def test__clear(tmp_path: Path) -> None:
    store = IndexStore(tmp_path / "index.json")
    store.save(IndexState())

    store.clear()
    store.clear()

    assert store.load() is None
