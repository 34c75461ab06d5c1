"""Invalidation fan-out engine: full and partial rebuilds of route snapshots."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, TypeVar

from routesnap.adapters.base import AsyncCdn, AsyncSnapshotStore
from routesnap.errors import ConfigurationError
from routesnap.index import TagIndex
from routesnap.keys import invalidation_path, object_key, project_wildcard
from routesnap.log import RunLog
from routesnap.renderer import RouteRenderer
from routesnap.schema import ProjectMap, ProjectMapNode
from routesnap.tags import tags_from_dependencies
from routesnap.types import SNAPSHOT_STATE, Composition, Dependencies, RouteResult

T = TypeVar("T")
R = TypeVar("R")

LOCALE_PLACEHOLDER = ":locale"


class Discovery(Protocol):
    """Sitemap side of the upstream API used by full rebuilds."""

    async def locales(self, project_id: str) -> list[str]: ...

    async def project_maps(self, project_id: str) -> list[ProjectMap]: ...

    async def project_map_nodes(
        self, project_id: str, project_map_id: str
    ) -> list[ProjectMapNode]: ...


@dataclass(frozen=True, slots=True)
class RouteOutcome:
    """What happened to one route during a run."""

    path: str
    result: str | None  # RouteResult kind, None when the route failed
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    """Outcome of one rebuild run."""

    mode: Literal["full", "partial"]
    routes: list[RouteOutcome] = field(default_factory=list)
    invalidated: list[str] = field(default_factory=list)
    invalidation_id: str | None = None
    invalidation_error: str | None = None

    @property
    def failed_routes(self) -> list[RouteOutcome]:
        return [r for r in self.routes if not r.ok]

    @property
    def error_count(self) -> int:
        return len(self.failed_routes) + (1 if self.invalidation_error else 0)

    @property
    def outcome(self) -> str:
        if self.error_count:
            return f"completed with {self.error_count} errors"
        return "completed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "outcome": self.outcome,
            "routes": [
                {"path": r.path, "result": r.result, "error": r.error}
                for r in self.routes
            ],
            "invalidated": self.invalidated,
            "invalidationId": self.invalidation_id,
        }


def select_project_map(project_maps: Sequence[ProjectMap]) -> ProjectMap | None:
    """The map flagged default, else the first one."""
    for project_map in project_maps:
        if project_map.default:
            return project_map
    return project_maps[0] if project_maps else None


def expand_paths(nodes: Iterable[ProjectMapNode], locales: Sequence[str]) -> list[str]:
    """Concrete paths to render, in sitemap order and without duplicates.

    Locale-parameterized paths expand once per locale, preferring the node's
    per-locale path. Paths still holding a placeholder are dropped.
    """
    paths: list[str] = []
    for node in nodes:
        if LOCALE_PLACEHOLDER not in node.path:
            paths.append(node.path)
            continue
        for locale in locales:
            override = (node.locales or {}).get(locale)
            template = node.path
            if override is not None and override.path is not None:
                template = override.path
            paths.append(template.replace(LOCALE_PLACEHOLDER, locale))
    return list(dict.fromkeys(p for p in paths if ":" not in p))


def encode_snapshot(body: dict[str, Any]) -> bytes:
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def stage_file(file: Path, body: bytes) -> None:
    file.parent.mkdir(parents=True, exist_ok=True)
    file.write_bytes(body)


def route_tags(result: RouteResult) -> set[str]:
    """Tags a render result should leave in the index."""
    if isinstance(result, Composition):
        return tags_from_dependencies(result.dependencies)
    return set()


class FanoutEngine:
    """Re-renders routes and keeps snapshots, the tag index and the CDN in step.

    All collaborators are injected; one engine serves one project. Per-route
    work runs concurrently, at most ``concurrency`` routes at a time.
    """

    def __init__(
        self,
        *,
        project_id: str,
        discovery: Discovery,
        renderer: RouteRenderer,
        store: AsyncSnapshotStore,
        index: TagIndex,
        cdn: AsyncCdn,
        log: RunLog | None = None,
        concurrency: int = 4,
        state: str = SNAPSHOT_STATE,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._project_id = project_id
        self._discovery = discovery
        self._renderer = renderer
        self._store = store
        self._index = index
        self._cdn = cdn
        self._log = log or RunLog()
        self._concurrency = concurrency
        self._state = state

    async def _bounded(
        self, items: Sequence[T], fn: Callable[[T], Awaitable[R]]
    ) -> list[R]:
        """Run fn over items with bounded concurrency, keeping input order."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(item: T) -> R:
            async with semaphore:
                return await fn(item)

        return list(await asyncio.gather(*(run(item) for item in items)))

    async def _process(
        self, path: str, pipeline: Callable[[str], Awaitable[RouteResult]]
    ) -> RouteOutcome:
        try:
            result = await pipeline(path)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            self._log.error("route_failed", path=path, error=error)
            return RouteOutcome(path=path, result=None, error=error)
        return RouteOutcome(path=path, result=result.kind)

    async def _invalidate(self, report: RunReport, paths: list[str]) -> None:
        self._log.info("invalidate", paths=paths)
        try:
            report.invalidation_id = await self._cdn.invalidate(paths)
        except Exception as e:
            report.invalidation_error = f"{type(e).__name__}: {e}"
            self._log.error(
                "invalidation_failed", paths=paths, error=report.invalidation_error
            )
            return
        report.invalidated = paths

    def _finish(self, report: RunReport) -> RunReport:
        if report.error_count:
            self._log.error("run_finished", mode=report.mode, outcome=report.outcome)
        else:
            self._log.info("run_finished", mode=report.mode, outcome=report.outcome)
        return report

    async def render_and_sync_all(self, staging_dir: Path) -> RunReport:
        """Render every route in the sitemap and mirror them into the store."""
        project_id = self._project_id
        report = RunReport(mode="full")

        locales = await self._discovery.locales(project_id)
        self._log.info("locales", locales=locales)

        project_map = select_project_map(
            await self._discovery.project_maps(project_id)
        )
        if project_map is None:
            raise ConfigurationError("No project map found")

        nodes = await self._discovery.project_map_nodes(project_id, project_map.id)
        paths = expand_paths(nodes, locales)
        self._log.info(
            "paths_to_render",
            project_map=project_map.id,
            count=len(paths),
            staging_dir=str(staging_dir),
        )

        async def pipeline(path: str) -> RouteResult:
            self._log.info("rendering", path=path)
            result = await self._renderer.render(project_id, path, self._state)
            if isinstance(result, Composition):
                file = staging_dir / object_key(project_id, path, self._state)
                await asyncio.to_thread(stage_file, file, encode_snapshot(result.body))
                self._log.info("staged", path=path, file=str(file))
            await self._index.replace_tags(project_id, path, route_tags(result))
            return result

        report.routes = await self._bounded(
            paths, lambda path: self._process(path, pipeline)
        )

        # A failed render must not evict the snapshot it failed to replace
        protect = {
            object_key(project_id, r.path, self._state) for r in report.failed_routes
        }
        summary = await self._store.sync_directory(
            staging_dir / project_id, project_id, protect=protect
        )
        self._log.info(
            "synced",
            uploaded=len(summary.uploaded),
            unchanged=len(summary.unchanged),
            deleted=len(summary.deleted),
        )

        await self._invalidate(report, [project_wildcard(project_id)])
        return self._finish(report)

    async def affected_routes(self, tags: Iterable[str]) -> list[str]:
        """Union of the routes recorded under any of tags."""
        found = await self._bounded(
            sorted(tags),
            lambda tag: self._index.routes_for_tag(self._project_id, tag),
        )
        return sorted(set().union(*found))

    async def render_affected(self, dependencies: Dependencies) -> RunReport:
        """Re-render only the routes depending on the changed dependencies."""
        project_id = self._project_id
        report = RunReport(mode="partial")

        tags = tags_from_dependencies(dependencies)
        self._log.info("affected_tags", tags=sorted(tags))

        # Resolved up front so the run works from the index as it was before
        # any route of this run rewrote its tags.
        paths = await self.affected_routes(tags)
        self._log.info("affected_paths", paths=paths)

        invalidations: set[str] = set()

        async def pipeline(path: str) -> RouteResult:
            self._log.info("rendering", path=path)
            result = await self._renderer.render(project_id, path, self._state)
            key = object_key(project_id, path, self._state)
            invalidations.add(invalidation_path(key))
            if isinstance(result, Composition):
                await self._store.put(key, encode_snapshot(result.body))
                self._log.info("object_written", path=path, key=key)
            else:
                await self._store.delete(key)
                self._log.info("object_deleted", path=path, key=key, result=result.kind)
            await self._index.replace_tags(project_id, path, route_tags(result))
            return result

        report.routes = await self._bounded(
            paths, lambda path: self._process(path, pipeline)
        )

        if invalidations:
            await self._invalidate(report, sorted(invalidations))
        else:
            self._log.info("invalidation_skipped", reason="no paths to invalidate")
        return self._finish(report)
