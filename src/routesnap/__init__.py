"""routesnap - Static route snapshots with dependency-tag invalidation."""

from contextlib import suppress

# Adapters (async only)
from routesnap.adapters import (
    AsyncCdn,
    AsyncIndexStore,
    AsyncMemoryCdn,
    AsyncMemoryIndexStore,
    AsyncMemorySnapshotStore,
    AsyncSnapshotStore,
)

# Edge function
from routesnap.edge import handle_viewer_request

# Fan-out engine
from routesnap.engine import FanoutEngine, RouteOutcome, RunReport, expand_paths
from routesnap.errors import (
    ConfigurationError,
    IndexWriteError,
    InvalidationError,
    RoutesnapError,
    UpstreamError,
    UpstreamSchemaError,
)
from routesnap.index import TagIndex
from routesnap.keys import object_key
from routesnap.log import RunLog, configure_logging
from routesnap.renderer import RouteRenderer
from routesnap.tags import tags_from_dependencies

# Core types
from routesnap.types import (
    SNAPSHOT_STATE,
    Composition,
    Dependencies,
    IndexEntry,
    NotFound,
    Redirect,
    RouteResult,
    TagDiff,
)
from routesnap.upstream import UpstreamClient

# Optional adapter imports - only available when dependencies are installed
with suppress(ImportError):
    from routesnap.adapters import (
        AsyncCloudFrontCdn,
        AsyncDynamoIndexStore,
        AsyncS3SnapshotStore,
    )

with suppress(ImportError):
    from routesnap.adapters import AsyncRedisIndexStore

__version__ = "0.1.0"

__all__ = [
    "SNAPSHOT_STATE",
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
    "Composition",
    "ConfigurationError",
    "Dependencies",
    "FanoutEngine",
    "IndexEntry",
    "IndexWriteError",
    "InvalidationError",
    "NotFound",
    "Redirect",
    "RouteOutcome",
    "RouteRenderer",
    "RouteResult",
    "RoutesnapError",
    "RunLog",
    "RunReport",
    "TagDiff",
    "TagIndex",
    "UpstreamClient",
    "UpstreamError",
    "UpstreamSchemaError",
    "configure_logging",
    "expand_paths",
    "handle_viewer_request",
    "object_key",
    "tags_from_dependencies",
]
