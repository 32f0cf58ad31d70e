"""Unit tests for the content store."""

import json
from pathlib import Path
from typing import Any

import pytest

from sketchvault.app.drawings.content import ContentStore, normalize_scene_payload
from sketchvault.app.drawings.errors import (
    DrawingNotFoundError,
    InvalidIdentifierError,
    InvalidPayloadError,
    StorageIOError,
)


class TestPathFor:
    """Test path derivation."""

    def test_path_uses_root_and_extension(self, content_store: ContentStore) -> None:
        assert content_store.path_for("abc") == content_store.root / "abc.excalidraw"

    @pytest.mark.parametrize("drawing_id", ["", "../escape", "a/b", "a\\b", "x" * 101])
    def test_invalid_id_raises(self, content_store: ContentStore, drawing_id: str) -> None:
        with pytest.raises(InvalidIdentifierError):
            content_store.path_for(drawing_id)


class TestNormalizePayload:
    """Test scene payload normalization."""

    def test_accepts_json_string(self, scene: dict[str, Any]) -> None:
        assert normalize_scene_payload(json.dumps(scene)) == scene

    def test_rejects_unparsable_string(self) -> None:
        with pytest.raises(InvalidPayloadError, match="not valid JSON"):
            normalize_scene_payload("{not json")

    def test_rejects_non_object(self) -> None:
        with pytest.raises(InvalidPayloadError, match="must be an object"):
            normalize_scene_payload("[1, 2, 3]")

    def test_rejects_bad_envelope(self) -> None:
        with pytest.raises(InvalidPayloadError, match="envelope"):
            normalize_scene_payload({"type": "excalidraw", "version": 2})


class TestSaveAndLoad:
    """Test save/load round trips and error surfacing."""

    @pytest.mark.asyncio
    async def test_save_creates_root_and_load_returns_document(
        self, content_store: ContentStore, scene: dict[str, Any]
    ) -> None:
        assert not content_store.root.exists()

        await content_store.save("sketch-1", scene)
        loaded = await content_store.load("sketch-1")

        assert content_store.root.is_dir()
        assert loaded == scene

    @pytest.mark.asyncio
    async def test_save_writes_pretty_json(
        self, content_store: ContentStore, scene: dict[str, Any]
    ) -> None:
        await content_store.save("sketch-1", scene)

        text = content_store.path_for("sketch-1").read_text(encoding="utf-8")
        assert text == json.dumps(scene, indent=2, ensure_ascii=False)

    @pytest.mark.asyncio
    async def test_save_overwrites(
        self, content_store: ContentStore, scene: dict[str, Any]
    ) -> None:
        await content_store.save("sketch-1", scene)
        updated = {**scene, "elements": []}

        await content_store.save("sketch-1", updated)

        assert await content_store.load("sketch-1") == updated

    @pytest.mark.asyncio
    async def test_save_invalid_id_touches_nothing(
        self, content_store: ContentStore, scene: dict[str, Any]
    ) -> None:
        with pytest.raises(InvalidIdentifierError):
            await content_store.save("../outside", scene)

        assert not content_store.root.exists()

    @pytest.mark.asyncio
    async def test_save_invalid_payload_touches_nothing(self, content_store: ContentStore) -> None:
        with pytest.raises(InvalidPayloadError):
            await content_store.save("sketch-1", {"type": "excalidraw"})

        assert not content_store.root.exists()

    @pytest.mark.asyncio
    async def test_load_missing_returns_none(self, content_store: ContentStore) -> None:
        assert await content_store.load("nope") is None

    @pytest.mark.asyncio
    async def test_load_invalid_id_returns_none(self, content_store: ContentStore) -> None:
        assert await content_store.load("../etc/passwd") is None

    @pytest.mark.asyncio
    async def test_load_corrupt_file_raises(self, content_store: ContentStore) -> None:
        content_store.root.mkdir(parents=True)
        content_store.path_for("broken").write_text("{oops", encoding="utf-8")

        with pytest.raises(StorageIOError):
            await content_store.load("broken")


class TestRemove:
    """Test content removal."""

    @pytest.mark.asyncio
    async def test_remove_deletes_only_that_file(
        self, content_store: ContentStore, scene: dict[str, Any]
    ) -> None:
        await content_store.save("keep", scene)
        await content_store.save("drop", scene)

        await content_store.remove("drop")

        assert not await content_store.exists("drop")
        assert await content_store.exists("keep")

    @pytest.mark.asyncio
    async def test_remove_missing_raises_not_found(self, tmp_path: Path) -> None:
        store = ContentStore(tmp_path)

        with pytest.raises(DrawingNotFoundError):
            await store.remove("ghost")

    @pytest.mark.asyncio
    async def test_exists_is_false_for_invalid_id(self, content_store: ContentStore) -> None:
        assert await content_store.exists("a/b") is False
