"""Base adapter protocols for the snapshot store, the index store and the CDN."""

from collections.abc import Collection, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from routesnap.types import IndexEntry, SyncSummary

# Largest batch an index store is ever handed (DynamoDB BatchWriteItem limit).
MAX_BATCH_SIZE = 25


@runtime_checkable
class AsyncSnapshotStore(Protocol):
    """Object storage for rendered snapshots."""

    async def get(self, key: str) -> bytes | None:
        """Get a snapshot body by key."""
        ...

    async def put(self, key: str, body: bytes) -> None:
        """Store a snapshot body."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a snapshot; no-op if absent."""
        ...

    async def sync_directory(
        self,
        local_dir: Path,
        prefix: str,
        *,
        protect: Collection[str] = (),
    ) -> SyncSummary:
        """Mirror local_dir onto prefix, deleting destination keys not present
        locally unless they are listed in protect."""
        ...


@runtime_checkable
class AsyncIndexStore(Protocol):
    """Table of (tag, route) entries queryable from either side."""

    async def query_by_tag(self, tag_key: str) -> list[str]:
        """Route keys stored under a tag key."""
        ...

    async def query_by_route(self, route_key: str) -> list[str]:
        """Tag keys stored under a route key."""
        ...

    async def batch_put(self, entries: Sequence[IndexEntry]) -> None:
        """Insert at most MAX_BATCH_SIZE entries."""
        ...

    async def batch_delete(self, entries: Sequence[IndexEntry]) -> None:
        """Delete at most MAX_BATCH_SIZE entries."""
        ...


@runtime_checkable
class AsyncCdn(Protocol):
    """CDN invalidation control plane."""

    async def invalidate(self, paths: Sequence[str]) -> str:
        """Submit one invalidation batch; returns its id."""
        ...
