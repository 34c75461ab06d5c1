"""Fixed-size chunking of ordered write sequences."""

from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most size items, in order."""
    if size < 1:
        raise ValueError(f"Invalid chunk size: {size!r}")
    for start in range(0, len(items), size):
        yield items[start : start + size]
