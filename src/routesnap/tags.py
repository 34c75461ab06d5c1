"""Dependency tag derivation and index key helpers."""

import json
from typing import Any

from routesnap.types import Dependencies

_KEY_SEPARATOR = "|"
_TAG_SEPARATOR = "!"

_ESCAPE_MAP = {"\\": "\\\\", _TAG_SEPARATOR: "\\" + _TAG_SEPARATOR}


def _escape_kind(kind: str) -> str:
    """Escape separator characters so the first bare ! ends the kind."""
    result = kind
    for char, escaped in _ESCAPE_MAP.items():
        result = result.replace(char, escaped)
    return result


def _canonical(value: Any) -> Any:
    """Collapse JSON numbers that differ only in spelling (1 vs 1.0)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _canonical(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_canonical(v) for v in value]
    return value


def normalize_identifier(identifier: str | dict[str, Any]) -> str:
    """Normalize a dependency identifier to its canonical string form.

    Objects become canonical JSON (sorted keys, compact separators, integral
    numbers without a fraction). Strings stay verbatim unless they start with
    a character a canonical object or a quoted string could start with, in
    which case they are JSON-quoted.
    """
    if isinstance(identifier, str):
        if identifier.startswith(("{", '"')):
            return json.dumps(identifier, ensure_ascii=False)
        return identifier
    return json.dumps(
        _canonical(identifier),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def make_tag(kind: str, identifier: str | dict[str, Any]) -> str:
    """Build the tag for one dependency."""
    return f"{_escape_kind(kind)}{_TAG_SEPARATOR}{normalize_identifier(identifier)}"


def tags_from_dependencies(dependencies: Dependencies | None) -> set[str]:
    """
    Derive the tag set of a dependency set.

    Example:
        tags_from_dependencies({"component": ["Hero"], "dataType": [{"id": 1}]})
        # {"component!Hero", 'dataType!{"id":1}'}
    """
    if not dependencies:
        return set()
    return {
        make_tag(kind, identifier)
        for kind, identifiers in dependencies.items()
        for identifier in identifiers
    }


def index_key(project_id: str, value: str) -> str:
    """Scope a tag or a path to a project for storage in the index."""
    return f"{project_id}{_KEY_SEPARATOR}{value}"


def split_index_key(key: str) -> tuple[str, str] | None:
    """Split an index key into (project_id, value); None if malformed."""
    project_id, sep, value = key.partition(_KEY_SEPARATOR)
    if not sep:
        return None
    return project_id, value
