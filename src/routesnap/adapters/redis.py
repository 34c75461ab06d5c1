"""Redis tag index adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from routesnap.adapters.base import MAX_BATCH_SIZE
from routesnap.types import IndexEntry


def _decode(values: Any) -> list[str]:
    return sorted(v.decode("utf-8") if isinstance(v, bytes) else v for v in values)


class AsyncRedisIndexStore:
    """Async Redis index store.

    Keeps one set per tag key (its routes) and one set per route key (its
    tags); a batch updates both sides in a single MULTI/EXEC pipeline.
    """

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        prefix: str = "routesnap",
    ) -> None:
        self._client = client
        self._prefix = prefix

    def _tag_key(self, tag_key: str) -> str:
        """Generate full Redis key for the routes of a tag."""
        return f"{self._prefix}:tag:{tag_key}"

    def _route_key(self, route_key: str) -> str:
        """Generate full Redis key for the tags of a route."""
        return f"{self._prefix}:route:{route_key}"

    async def query_by_tag(self, tag_key: str) -> list[str]:
        """Route keys stored under a tag key."""
        return _decode(await self._client.smembers(self._tag_key(tag_key)))

    async def query_by_route(self, route_key: str) -> list[str]:
        """Tag keys stored under a route key."""
        return _decode(await self._client.smembers(self._route_key(route_key)))

    async def batch_put(self, entries: Sequence[IndexEntry]) -> None:
        """Insert entries."""
        if len(entries) > MAX_BATCH_SIZE:
            raise ValueError(f"batch of {len(entries)} entries exceeds limit")
        async with self._client.pipeline(transaction=True) as pipe:
            for entry in entries:
                pipe.sadd(self._tag_key(entry.tag), entry.route)
                pipe.sadd(self._route_key(entry.route), entry.tag)
            await pipe.execute()

    async def batch_delete(self, entries: Sequence[IndexEntry]) -> None:
        """Delete entries."""
        if len(entries) > MAX_BATCH_SIZE:
            raise ValueError(f"batch of {len(entries)} entries exceeds limit")
        async with self._client.pipeline(transaction=True) as pipe:
            for entry in entries:
                pipe.srem(self._tag_key(entry.tag), entry.route)
                pipe.srem(self._route_key(entry.route), entry.tag)
            await pipe.execute()

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
