"""Shared pytest fixtures."""

import pytest

from routesnap import (
    AsyncMemoryCdn,
    AsyncMemoryIndexStore,
    AsyncMemorySnapshotStore,
    FanoutEngine,
    RouteRenderer,
    RunLog,
    TagIndex,
)
from helpers import PROJECT_ID, FakeUpstream


@pytest.fixture
def snapshot_store() -> AsyncMemorySnapshotStore:
    """Create a fresh in-memory snapshot store for each test."""
    return AsyncMemorySnapshotStore()


@pytest.fixture
def index_store() -> AsyncMemoryIndexStore:
    """Create a fresh in-memory index store for each test."""
    return AsyncMemoryIndexStore()


@pytest.fixture
def tag_index(index_store: AsyncMemoryIndexStore) -> TagIndex:
    return TagIndex(index_store)


@pytest.fixture
def cdn() -> AsyncMemoryCdn:
    return AsyncMemoryCdn()


@pytest.fixture
def run_log() -> RunLog:
    return RunLog()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def engine(
    upstream: FakeUpstream,
    snapshot_store: AsyncMemorySnapshotStore,
    tag_index: TagIndex,
    cdn: AsyncMemoryCdn,
    run_log: RunLog,
) -> FanoutEngine:
    """Create an engine wired to in-memory collaborators."""
    return FanoutEngine(
        project_id=PROJECT_ID,
        discovery=upstream,
        renderer=RouteRenderer(upstream),
        store=snapshot_store,
        index=tag_index,
        cdn=cdn,
        log=run_log,
        concurrency=2,
    )
