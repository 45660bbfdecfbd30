"""Tests for local track content storage."""

import pytest

from src.services.content_storage import LocalContentStorage


@pytest.fixture
def storage(tmp_path):
    return LocalContentStorage(str(tmp_path / "uploads"))


@pytest.mark.asyncio
async def test_store_writes_under_generated_name(storage):
    content_ref = await storage.store(b"audio", "My Song.MP3")

    assert content_ref.endswith(".mp3")
    assert "My Song" not in content_ref
    assert storage.exists(content_ref)
    assert storage.path_for(content_ref).read_bytes() == b"audio"


@pytest.mark.asyncio
async def test_references_are_unique(storage):
    first = await storage.store(b"a", "a.wav")
    second = await storage.store(b"b", "a.wav")
    assert first != second


@pytest.mark.parametrize("content_ref", ["../secret.txt", "nested/../../etc/passwd", "/etc/passwd"])
def test_path_escapes_are_rejected(storage, content_ref):
    with pytest.raises(ValueError):
        storage.path_for(content_ref)
    assert storage.exists(content_ref) is False


def test_missing_content(storage):
    assert storage.exists("1700000000000-deadbeef.mp3") is False


def test_root_is_created_lazily(tmp_path):
    LocalContentStorage(str(tmp_path / "later"))
    assert not (tmp_path / "later").exists()
