"""Test doubles shared across test modules."""

from typing import Any

from routesnap.schema import (
    ProjectMap,
    ProjectMapNode,
    parse,
    route_response_adapter,
)

PROJECT_ID = "proj"


def composition(path: str, dependencies: dict[str, Any]) -> dict[str, Any]:
    """Upstream route payload for a composition."""
    return {
        "type": "composition",
        "matchedRoute": path,
        "dynamicInputs": {},
        "compositionApiResponse": {"composition": {"_id": path}},
        "dependencies": dependencies,
    }


class FakeUpstream:
    """In-memory stand-in for the composition API."""

    def __init__(self) -> None:
        self.locale_codes: list[str] = ["en"]
        self.maps: list[ProjectMap] = [ProjectMap(id="map-1", default=True)]
        self.nodes: list[ProjectMapNode] = []
        self.routes: dict[str, dict[str, Any] | Exception] = {}
        self.rendered: list[str] = []

    async def locales(self, project_id: str) -> list[str]:
        return list(self.locale_codes)

    async def project_maps(self, project_id: str) -> list[ProjectMap]:
        return list(self.maps)

    async def project_map_nodes(
        self, project_id: str, project_map_id: str
    ) -> list[ProjectMapNode]:
        return list(self.nodes)

    async def route(self, project_id: str, path: str, state: str) -> Any:
        self.rendered.append(path)
        payload = self.routes.get(path, {"type": "notFound"})
        if isinstance(payload, Exception):
            raise payload
        result = parse(route_response_adapter, payload)
        return result.value  # type: ignore[union-attr]
