"""Tests for memory adapters."""

from pathlib import Path

import pytest

from routesnap import (
    AsyncMemoryCdn,
    AsyncMemoryIndexStore,
    AsyncMemorySnapshotStore,
    IndexEntry,
)


class TestAsyncMemorySnapshotStore:
    """Tests for AsyncMemorySnapshotStore."""

    @pytest.mark.asyncio
    async def test_get_nonexistent_returns_none(
        self, snapshot_store: AsyncMemorySnapshotStore
    ) -> None:
        """Test that getting a nonexistent key returns None."""
        assert await snapshot_store.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_put_get_delete(self, snapshot_store: AsyncMemorySnapshotStore) -> None:
        """Test the point operations."""
        await snapshot_store.put("p/a/64.json", b"{}")
        assert await snapshot_store.get("p/a/64.json") == b"{}"

        await snapshot_store.delete("p/a/64.json")
        await snapshot_store.delete("p/a/64.json")
        assert await snapshot_store.get("p/a/64.json") is None

    @pytest.mark.asyncio
    async def test_sync_directory(
        self, snapshot_store: AsyncMemorySnapshotStore, tmp_path: Path
    ) -> None:
        """Test upload, skip-unchanged, delete and protect in one sync."""
        (tmp_path / "new").mkdir()
        (tmp_path / "new" / "64.json").write_bytes(b'{"v":2}')
        (tmp_path / "same").mkdir()
        (tmp_path / "same" / "64.json").write_bytes(b'{"v":1}')
        await snapshot_store.put("p/same/64.json", b'{"v":1}')
        await snapshot_store.put("p/stale/64.json", b"{}")
        await snapshot_store.put("p/kept/64.json", b"{}")
        await snapshot_store.put("q/stale/64.json", b"{}")

        summary = await snapshot_store.sync_directory(
            tmp_path, "p", protect={"p/kept/64.json"}
        )

        assert summary.uploaded == ["p/new/64.json"]
        assert summary.unchanged == ["p/same/64.json"]
        assert summary.deleted == ["p/stale/64.json"]
        assert snapshot_store.keys == {
            "p/new/64.json",
            "p/same/64.json",
            "p/kept/64.json",
            "q/stale/64.json",
        }

    @pytest.mark.asyncio
    async def test_sync_missing_directory_clears_prefix(
        self, snapshot_store: AsyncMemorySnapshotStore, tmp_path: Path
    ) -> None:
        """Test that an empty staging area mirrors to an empty prefix."""
        await snapshot_store.put("p/a/64.json", b"{}")
        summary = await snapshot_store.sync_directory(tmp_path / "absent", "p")
        assert summary.deleted == ["p/a/64.json"]


class TestAsyncMemoryIndexStore:
    """Tests for AsyncMemoryIndexStore."""

    @pytest.mark.asyncio
    async def test_put_and_query_both_ways(
        self, index_store: AsyncMemoryIndexStore
    ) -> None:
        """Test that entries are visible by tag and by route."""
        await index_store.batch_put(
            [IndexEntry("p|t!1", "p|/a"), IndexEntry("p|t!1", "p|/b")]
        )
        assert await index_store.query_by_tag("p|t!1") == ["p|/a", "p|/b"]
        assert await index_store.query_by_route("p|/a") == ["p|t!1"]

    @pytest.mark.asyncio
    async def test_delete(self, index_store: AsyncMemoryIndexStore) -> None:
        """Test deleting entries from both sides."""
        await index_store.batch_put([IndexEntry("p|t!1", "p|/a")])
        await index_store.batch_delete([IndexEntry("p|t!1", "p|/a")])
        assert await index_store.query_by_tag("p|t!1") == []
        assert await index_store.query_by_route("p|/a") == []

    @pytest.mark.asyncio
    async def test_oversized_batch_rejected(
        self, index_store: AsyncMemoryIndexStore
    ) -> None:
        """Test that the 25-entry limit is enforced like the real table."""
        entries = [IndexEntry(f"p|t!{i}", "p|/a") for i in range(26)]
        with pytest.raises(ValueError):
            await index_store.batch_put(entries)


@pytest.mark.asyncio
async def test_memory_cdn_records_batches(cdn: AsyncMemoryCdn) -> None:
    """Test that invalidations are recorded with increasing ids."""
    assert await cdn.invalidate(["/a"]) == "memory-1"
    assert await cdn.invalidate(["/b", "/c"]) == "memory-2"
    assert cdn.batches == [["/a"], ["/b", "/c"]]
