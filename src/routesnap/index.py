"""Dependency tag index: which routes depend on which tags."""

from __future__ import annotations

from collections.abc import Iterable

from routesnap.adapters.base import MAX_BATCH_SIZE, AsyncIndexStore
from routesnap.chunks import chunked
from routesnap.tags import index_key, split_index_key
from routesnap.types import IndexEntry, TagDiff

BATCH_SIZE = MAX_BATCH_SIZE


def _values(keys: Iterable[str], project_id: str) -> set[str]:
    """Strip the project scope from index keys, dropping foreign or bad keys."""
    values = set()
    for key in keys:
        parts = split_index_key(key)
        if parts is not None and parts[0] == project_id:
            values.add(parts[1])
    return values


class TagIndex:
    """Project-scoped reverse index over an index store."""

    def __init__(self, store: AsyncIndexStore, *, batch_size: int = BATCH_SIZE) -> None:
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        self._store = store
        self._batch_size = batch_size

    async def tags_for_route(self, project_id: str, path: str) -> set[str]:
        """All tags currently recorded for a route."""
        keys = await self._store.query_by_route(index_key(project_id, path))
        return _values(keys, project_id)

    async def routes_for_tag(self, project_id: str, tag: str) -> set[str]:
        """All route paths currently recorded under a tag."""
        keys = await self._store.query_by_tag(index_key(project_id, tag))
        return _values(keys, project_id)

    async def replace_tags(
        self, project_id: str, path: str, new_tags: Iterable[str]
    ) -> TagDiff:
        """Make the route's recorded tags equal new_tags.

        Only the difference is written. Insertions go first: if a later
        chunk fails the route is left over-tagged (re-rendered too often)
        rather than under-tagged (missed by an invalidation).
        """
        wanted = frozenset(new_tags)
        old = await self.tags_for_route(project_id, path)
        to_add = sorted(wanted - old)
        to_delete = sorted(old - wanted)

        route = index_key(project_id, path)
        for chunk in chunked(to_add, self._batch_size):
            await self._store.batch_put(
                [IndexEntry(tag=index_key(project_id, t), route=route) for t in chunk]
            )
        for chunk in chunked(to_delete, self._batch_size):
            await self._store.batch_delete(
                [IndexEntry(tag=index_key(project_id, t), route=route) for t in chunk]
            )

        return TagDiff(added=frozenset(to_add), removed=frozenset(to_delete))
