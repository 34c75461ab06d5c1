"""Validation of upstream responses and trigger payloads.

Every boundary parse returns a ``Valid`` or an ``Invalid`` value instead of
raising, so callers decide what a bad shape means for them: a fatal
discovery error, a failed route, or a fallback to a full rebuild.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Invalid:
    reason: str


ParseResult = Valid[T] | Invalid


DependencySet = dict[str, list[str] | list[dict[str, Any]]]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LocaleResult(_Model):
    locale: str


class LocalesResponse(_Model):
    results: list[LocaleResult]


class ProjectMap(_Model):
    id: str
    default: bool | None = None


class ProjectMapsResponse(_Model):
    project_maps: list[ProjectMap] = Field(alias="projectMaps")


class NodeLocale(_Model):
    path: str | None = None


class ProjectMapNode(_Model):
    id: str
    path: str
    locales: dict[str, NodeLocale] | None = None


class ProjectMapNodesResponse(_Model):
    nodes: list[ProjectMapNode]


class NotFoundResponse(_Model):
    type: Literal["notFound"]


class RedirectResponse(_Model):
    type: Literal["redirect"]


class CompositionResponse(_Model):
    type: Literal["composition"]
    matched_route: str = Field(alias="matchedRoute")
    dynamic_inputs: dict[str, str] = Field(alias="dynamicInputs")
    composition_api_response: Any = Field(default=None, alias="compositionApiResponse")
    dependencies: DependencySet

    def snapshot_body(self) -> dict[str, Any]:
        """The served artifact: everything but the dependency metadata."""
        return self.model_dump(by_alias=True, exclude={"dependencies"})


RouteResponse = Annotated[
    NotFoundResponse | RedirectResponse | CompositionResponse,
    Field(discriminator="type"),
]

dependencies_adapter: TypeAdapter[dict[str, list[str] | list[dict[str, Any]]]] = (
    TypeAdapter(DependencySet)
)
route_response_adapter: TypeAdapter[
    NotFoundResponse | RedirectResponse | CompositionResponse
] = TypeAdapter(RouteResponse)
locales_adapter = TypeAdapter(LocalesResponse)
project_maps_adapter = TypeAdapter(ProjectMapsResponse)
project_map_nodes_adapter = TypeAdapter(ProjectMapNodesResponse)


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        loc = ".".join(str(p) for p in detail["loc"]) or "<root>"
        parts.append(f"{loc}: {detail['msg']}")
    return "; ".join(parts)


def parse(adapter: TypeAdapter[T], data: object) -> ParseResult[T]:
    """Validate already-decoded data against a schema."""
    try:
        return Valid(adapter.validate_python(data))
    except ValidationError as e:
        return Invalid(_describe(e))


def parse_dependencies_json(body: str) -> ParseResult[dict[str, Any]]:
    """Decode and validate a changed-dependency trigger payload."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        return Invalid(f"body is not JSON: {e.msg}")
    return parse(dependencies_adapter, data)
