"""HTTP client for the upstream composition API."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx

from routesnap.errors import UpstreamError, UpstreamSchemaError
from routesnap.schema import (
    CompositionResponse,
    Invalid,
    NotFoundResponse,
    ProjectMap,
    ProjectMapNode,
    RedirectResponse,
    locales_adapter,
    parse,
    project_map_nodes_adapter,
    project_maps_adapter,
    route_response_adapter,
)

T = TypeVar("T")


class UpstreamClient:
    """Async client for the locale, project map and route endpoints.

    Every request bypasses the upstream's own cache so renders reflect
    current data.
    """

    def __init__(
        self,
        api_key: str,
        *,
        origin: str = "https://uniform.app",
        route_origin: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._origin = origin.rstrip("/")
        self._route_origin = (
            route_origin or self._origin.replace(".app", ".global")
        ).rstrip("/")
        self._client = httpx.AsyncClient(
            headers={"x-api-key": api_key, "x-bypass-cache": "true"},
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        url: str,
        params: dict[str, str],
        adapter: Any,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET a JSON document and validate it against a schema."""
        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"HTTP {response.status_code} from {url}: body is not JSON",
                status_code=response.status_code,
            ) from e

        result = parse(adapter, data)
        if isinstance(result, Invalid):
            raise UpstreamSchemaError(
                f"Unexpected response from {url} (HTTP {response.status_code})",
                reason=result.reason,
                status_code=response.status_code,
            )
        return result.value

    async def locales(self, project_id: str) -> list[str]:
        """Locale codes configured for the project."""
        response = await self._request(
            f"{self._origin}/api/v1/locales",
            {"projectId": project_id},
            locales_adapter,
        )
        return [result.locale for result in response.results]

    async def project_maps(self, project_id: str) -> list[ProjectMap]:
        """Project maps (sitemaps) of the project."""
        response = await self._request(
            f"{self._origin}/api/v1/project-map",
            {"projectId": project_id},
            project_maps_adapter,
        )
        return response.project_maps

    async def project_map_nodes(
        self, project_id: str, project_map_id: str
    ) -> list[ProjectMapNode]:
        """Expanded node tree of one project map."""
        response = await self._request(
            f"{self._origin}/api/v1/project-map-nodes",
            {
                "projectId": project_id,
                "projectMapId": project_map_id,
                "expanded": "true",
            },
            project_map_nodes_adapter,
        )
        return response.nodes

    async def route(
        self, project_id: str, path: str, state: str
    ) -> NotFoundResponse | RedirectResponse | CompositionResponse:
        """Resolve one route, asking for its dependency metadata."""
        return await self._request(
            f"{self._route_origin}/api/v1/route",
            {"projectId": project_id, "state": state, "path": path},
            route_response_adapter,
            headers={"x-uniform-deps": "true"},
        )

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
