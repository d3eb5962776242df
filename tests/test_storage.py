"""Tests for whole-document storage backends."""

import json
from pathlib import Path

import pytest

from ledger.models import default_state
from ledger.services.storage import (
    CorruptDocumentError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StorageUnavailableError,
)


KEY = "current_state"


class TestJsonFileStateStorage:
    """Tests for the local JSON file store."""

    @pytest.mark.asyncio
    async def test_load_first_run_returns_none(self, tmp_path):
        storage = JsonFileStateStorage(tmp_path / "ledger")
        assert await storage.load(KEY) is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path, sample_state):
        storage = JsonFileStateStorage(tmp_path / "ledger")
        assert await storage.save(KEY, sample_state) is True
        assert await storage.load(KEY) == sample_state

    @pytest.mark.asyncio
    async def test_save_replaces_previous(self, tmp_path, sample_state):
        storage = JsonFileStateStorage(tmp_path)
        await storage.save(KEY, sample_state)
        await storage.save(KEY, default_state())
        loaded = await storage.load(KEY)
        assert loaded.members == []

    @pytest.mark.asyncio
    async def test_file_is_backup_shaped(self, tmp_path, sample_state):
        """The stored file uses the same camelCase document as exports."""
        storage = JsonFileStateStorage(tmp_path)
        await storage.save(KEY, sample_state)
        document = json.loads(storage.path_for(KEY).read_text(encoding="utf-8"))
        assert document["mainTitle"] == "SPSIB ASSOCIATION"
        assert len(document["members"]) == 2

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, tmp_path, sample_state):
        storage = JsonFileStateStorage(tmp_path)
        await storage.save(KEY, sample_state)
        assert [p.name for p in tmp_path.iterdir()] == [f"{KEY}.json"]

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        storage = JsonFileStateStorage(tmp_path)
        storage.path_for(KEY).write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptDocumentError):
            await storage.load(KEY)

    @pytest.mark.asyncio
    async def test_wrong_shape_raises(self, tmp_path):
        storage = JsonFileStateStorage(tmp_path)
        storage.path_for(KEY).write_text('{"mainTitle": "X"}', encoding="utf-8")
        with pytest.raises(CorruptDocumentError):
            await storage.load(KEY)

    @pytest.mark.asyncio
    async def test_unwritable_location_raises_unavailable(self, tmp_path, sample_state):
        """A data dir that is actually a file cannot be written."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStateStorage(blocker / "ledger")
        with pytest.raises(StorageUnavailableError):
            await storage.save(KEY, sample_state)

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_document(self, tmp_path, sample_state, monkeypatch):
        """A write that dies before the rename leaves the old file intact."""
        storage = JsonFileStateStorage(tmp_path)
        await storage.save(KEY, sample_state)

        def broken_replace(src, dst):
            raise OSError("disk full")

        with monkeypatch.context() as m:
            m.setattr("ledger.services.storage.json_file.os.replace", broken_replace)
            with pytest.raises(StorageUnavailableError):
                await storage.save(KEY, default_state())

        assert await storage.load(KEY) == sample_state
        assert [p.name for p in tmp_path.iterdir()] == [f"{KEY}.json"]

    @pytest.mark.asyncio
    async def test_set_aside_renames_file(self, tmp_path):
        storage = JsonFileStateStorage(tmp_path)
        storage.path_for(KEY).write_text("{not json", encoding="utf-8")

        moved_to = await storage.set_aside(KEY)

        assert not storage.path_for(KEY).exists()
        assert moved_to is not None
        assert Path(moved_to).name.startswith(f"{KEY}.corrupt-")
        assert Path(moved_to).read_text(encoding="utf-8") == "{not json"
        assert await storage.load(KEY) is None

    @pytest.mark.asyncio
    async def test_set_aside_without_file(self, tmp_path):
        storage = JsonFileStateStorage(tmp_path)
        assert await storage.set_aside(KEY) is None


class TestInMemoryStateStorage:
    """Tests for the in-memory store."""

    @pytest.mark.asyncio
    async def test_round_trip_returns_fresh_object(self, sample_state):
        storage = InMemoryStateStorage()
        await storage.save(KEY, sample_state)
        loaded = await storage.load(KEY)
        assert loaded == sample_state
        assert loaded is not sample_state

    @pytest.mark.asyncio
    async def test_simulated_outage(self, sample_state):
        storage = InMemoryStateStorage()
        storage.fail_saves = True
        with pytest.raises(StorageUnavailableError):
            await storage.save(KEY, sample_state)
        storage.fail_loads = True
        with pytest.raises(StorageUnavailableError):
            await storage.load(KEY)

    @pytest.mark.asyncio
    async def test_set_aside_is_noop(self, sample_state):
        storage = InMemoryStateStorage()
        await storage.save(KEY, sample_state)
        assert await storage.set_aside(KEY) is None
        assert await storage.load(KEY) == sample_state
