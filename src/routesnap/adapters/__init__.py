"""Storage, index and CDN adapters for routesnap (async only)."""

from contextlib import suppress

from routesnap.adapters.base import (
    MAX_BATCH_SIZE,
    AsyncCdn,
    AsyncIndexStore,
    AsyncSnapshotStore,
)
from routesnap.adapters.memory import (
    AsyncMemoryCdn,
    AsyncMemoryIndexStore,
    AsyncMemorySnapshotStore,
)

# Optional adapters - only available when dependencies are installed
with suppress(ImportError):
    from routesnap.adapters.aws import (
        AsyncCloudFrontCdn,
        AsyncDynamoIndexStore,
        AsyncS3SnapshotStore,
    )

with suppress(ImportError):
    from routesnap.adapters.redis import AsyncRedisIndexStore

__all__ = [
    "MAX_BATCH_SIZE",
    "AsyncCdn",
    "AsyncCloudFrontCdn",
    "AsyncDynamoIndexStore",
    "AsyncIndexStore",
    "AsyncMemoryCdn",
    "AsyncMemoryIndexStore",
    "AsyncMemorySnapshotStore",
    "AsyncRedisIndexStore",
    "AsyncS3SnapshotStore",
    "AsyncSnapshotStore",
]
