"""In-memory adapters (async only)."""

import asyncio
from collections.abc import Collection, Sequence
from pathlib import Path

from routesnap.adapters.base import MAX_BATCH_SIZE
from routesnap.types import IndexEntry, SyncSummary


def _check_batch(entries: Sequence[IndexEntry]) -> None:
    if len(entries) > MAX_BATCH_SIZE:
        raise ValueError(
            f"batch of {len(entries)} entries exceeds limit of {MAX_BATCH_SIZE}"
        )


class AsyncMemorySnapshotStore:
    """Async in-memory snapshot store."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    @property
    def keys(self) -> set[str]:
        return set(self._objects)

    async def get(self, key: str) -> bytes | None:
        """Get a snapshot body by key."""
        async with self._lock:
            return self._objects.get(key)

    async def put(self, key: str, body: bytes) -> None:
        """Store a snapshot body."""
        async with self._lock:
            self._objects[key] = body

    async def delete(self, key: str) -> None:
        """Delete a snapshot."""
        async with self._lock:
            self._objects.pop(key, None)

    async def sync_directory(
        self,
        local_dir: Path,
        prefix: str,
        *,
        protect: Collection[str] = (),
    ) -> SyncSummary:
        """Mirror local_dir onto prefix."""
        summary = SyncSummary()
        local: dict[str, bytes] = {}
        if local_dir.is_dir():
            for file in sorted(local_dir.rglob("*")):
                if file.is_file():
                    key = f"{prefix}/{file.relative_to(local_dir).as_posix()}"
                    local[key] = file.read_bytes()

        async with self._lock:
            for key, body in local.items():
                existing = self._objects.get(key)
                if existing == body:
                    summary.unchanged.append(key)
                    continue
                self._objects[key] = body
                summary.uploaded.append(key)

            for key in sorted(self._objects):
                if (
                    key.startswith(f"{prefix}/")
                    and key not in local
                    and key not in protect
                ):
                    del self._objects[key]
                    summary.deleted.append(key)
        return summary


class AsyncMemoryIndexStore:
    """Async in-memory index store with both access paths."""

    def __init__(self) -> None:
        self._by_tag: dict[str, set[str]] = {}
        self._by_route: dict[str, set[str]] = {}
        self.batches: list[tuple[str, int]] = []  # ("put" | "delete", size)
        self._lock = asyncio.Lock()

    async def query_by_tag(self, tag_key: str) -> list[str]:
        """Route keys stored under a tag key."""
        async with self._lock:
            return sorted(self._by_tag.get(tag_key, ()))

    async def query_by_route(self, route_key: str) -> list[str]:
        """Tag keys stored under a route key."""
        async with self._lock:
            return sorted(self._by_route.get(route_key, ()))

    async def batch_put(self, entries: Sequence[IndexEntry]) -> None:
        """Insert entries."""
        _check_batch(entries)
        async with self._lock:
            self.batches.append(("put", len(entries)))
            for entry in entries:
                self._by_tag.setdefault(entry.tag, set()).add(entry.route)
                self._by_route.setdefault(entry.route, set()).add(entry.tag)

    async def batch_delete(self, entries: Sequence[IndexEntry]) -> None:
        """Delete entries."""
        _check_batch(entries)
        async with self._lock:
            self.batches.append(("delete", len(entries)))
            for entry in entries:
                self._by_tag.get(entry.tag, set()).discard(entry.route)
                self._by_route.get(entry.route, set()).discard(entry.tag)


class AsyncMemoryCdn:
    """Records invalidation batches instead of sending them."""

    def __init__(self) -> None:
        self.batches: list[list[str]] = []

    async def invalidate(self, paths: Sequence[str]) -> str:
        """Record one invalidation batch."""
        self.batches.append(list(paths))
        return f"memory-{len(self.batches)}"
