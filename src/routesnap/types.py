"""Core types for routesnap."""

from dataclasses import dataclass, field
from typing import Any, Literal

# A dependency set as sent by the upstream: kind -> identifiers, where an
# identifier is a plain string or a JSON object.
Dependencies = dict[str, list[str] | list[dict[str, Any]]]

# The only rendered state that is ever cached.
SNAPSHOT_STATE = "64"


@dataclass(frozen=True, slots=True)
class NotFound:
    """The upstream has no route at this path."""

    kind: Literal["notFound"] = "notFound"


@dataclass(frozen=True, slots=True)
class Redirect:
    """The upstream answers this path with a redirect (never cached)."""

    kind: Literal["redirect"] = "redirect"


@dataclass(frozen=True, slots=True)
class Composition:
    """A rendered page body plus the dependencies it was built from."""

    body: dict[str, Any]
    dependencies: Dependencies
    kind: Literal["composition"] = "composition"


RouteResult = NotFound | Redirect | Composition


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One (tag, route) row of the dependency tag index, project-scoped."""

    tag: str  # "<project_id>|<tag>"
    route: str  # "<project_id>|<path>"


@dataclass(frozen=True, slots=True)
class TagDiff:
    """What replace_tags changed for one route."""

    added: frozenset[str]
    removed: frozenset[str]


@dataclass(frozen=True, slots=True)
class SyncSummary:
    """Result of mirroring a staging directory into the snapshot store."""

    uploaded: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
