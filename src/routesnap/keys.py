"""Snapshot object key convention, shared by the engine and the edge."""

import base64

from routesnap.types import SNAPSHOT_STATE


def base64url(value: str) -> str:
    """Unpadded URL-safe base64 of the UTF-8 bytes of value."""
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")


def object_key(project_id: str, path: str, state: str = SNAPSHOT_STATE) -> str:
    """Object key of a route's snapshot: project/base64url(path)/state.json."""
    return f"{project_id}/{base64url(path)}/{state}.json"


def invalidation_path(key: str) -> str:
    """CDN path for an object key."""
    return f"/{key}"


def project_wildcard(project_id: str) -> str:
    """CDN path pattern covering every snapshot of a project."""
    return f"/{project_id}/*"
