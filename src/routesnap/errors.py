from __future__ import annotations


class RoutesnapError(Exception):
    """Base class for all routesnap failures."""


class ConfigurationError(RoutesnapError):
    """Required settings are missing or the project has nothing to render.

    Fatal: raised before any route is processed.
    """


class UpstreamError(RoutesnapError):
    """The composition API could not be reached or returned a non-JSON body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamSchemaError(UpstreamError):
    """The composition API answered with an unexpected shape."""

    def __init__(
        self, message: str, *, reason: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"{message}: {reason}", status_code=status_code)
        self.reason = reason


class IndexWriteError(RoutesnapError):
    """The index store did not apply a whole batch."""

    def __init__(self, message: str, *, unprocessed: int) -> None:
        super().__init__(message)
        self.unprocessed = unprocessed


class InvalidationError(RoutesnapError):
    """The CDN rejected or failed an invalidation batch."""
