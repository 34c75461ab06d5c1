"""Viewer-request function for the CDN edge.

Maps a route API request onto its precomputed snapshot object, or answers
directly when the request cannot be served from a snapshot. Pure: no I/O,
no state, and the incoming event is never mutated.
"""

from __future__ import annotations

import copy
import json
from typing import Any

from routesnap.keys import object_key
from routesnap.types import SNAPSHOT_STATE

ROUTE_API_PATH = "/api/v1/route"

REQUIRED_PARAMS = ("projectId", "path", "state")

# Request shapes that were never precomputed.
DENIED_PARAMS = (
    "projectMapId",
    "withComponentIDs",
    "withContentSourceMap",
    "releaseId",
    "dataResourcesVariant",
)


def respond(status_code: int, body: Any) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": {"content-type": {"value": "application/json"}},
    }


def _param(querystring: dict[str, Any], key: str) -> str | None:
    entry = querystring.get(key)
    if not isinstance(entry, dict):
        return None
    value = entry.get("value")
    return value if isinstance(value, str) else None


def handle_viewer_request(event: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a route API request to its snapshot key, or reject it."""
    request = event["request"]
    uri = request.get("uri", "")

    if uri != ROUTE_API_PATH and not uri.startswith(f"{ROUTE_API_PATH}?"):
        return respond(501, {"message": "Not Implemented"})

    querystring = request.get("querystring") or {}

    for key in REQUIRED_PARAMS:
        if _param(querystring, key) is None:
            return respond(422, {"message": f"{key} is required"})

    if _param(querystring, "state") != SNAPSHOT_STATE:
        return respond(422, {"message": f"state must be {SNAPSHOT_STATE}"})

    for key in DENIED_PARAMS:
        if _param(querystring, key) is not None:
            return respond(422, {"message": f"{key} is not allowed"})

    project_id = querystring["projectId"]["value"]
    path = querystring["path"]["value"]

    rewritten = copy.deepcopy(request)
    rewritten["uri"] = f"/{object_key(project_id, path, SNAPSHOT_STATE)}"
    return rewritten
