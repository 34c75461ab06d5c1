"""Route renderer: one upstream request per route, classified."""

from __future__ import annotations

from typing import Protocol

from routesnap.schema import (
    CompositionResponse,
    NotFoundResponse,
    RedirectResponse,
)
from routesnap.types import (
    SNAPSHOT_STATE,
    Composition,
    NotFound,
    Redirect,
    RouteResult,
)


class RouteSource(Protocol):
    async def route(
        self, project_id: str, path: str, state: str
    ) -> NotFoundResponse | RedirectResponse | CompositionResponse: ...


class RouteRenderer:
    """Renders routes through the upstream and classifies the result.

    No retries; a failed or malformed response raises and is the caller's
    per-route failure to handle.
    """

    def __init__(self, source: RouteSource) -> None:
        self._source = source

    async def render(
        self, project_id: str, path: str, state: str = SNAPSHOT_STATE
    ) -> RouteResult:
        response = await self._source.route(project_id, path, state)
        if isinstance(response, CompositionResponse):
            return Composition(
                body=response.snapshot_body(),
                dependencies=response.dependencies,
            )
        if isinstance(response, RedirectResponse):
            return Redirect()
        return NotFound()
