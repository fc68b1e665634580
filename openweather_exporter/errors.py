from __future__ import annotations

from typing import Optional


class ExporterError(Exception):
    """Base class for all exporter errors."""


class StartupError(ExporterError):
    """Fatal: raised while building the app, the process must not serve."""


class ConfigurationError(StartupError):
    """Invalid setting (unknown unit, malformed location list or listen address)."""


class ResolutionError(StartupError):
    """A configured location could not be geocoded."""


class CollectionError(ExporterError):
    """Recoverable: only the affected (location, source) is skipped for one scrape."""


class UpstreamFetchError(CollectionError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(UpstreamFetchError):
    """Response body could not be decoded into a snapshot."""


class CacheWriteError(CollectionError):
    pass


__all__ = [
    "ExporterError",
    "StartupError",
    "ConfigurationError",
    "ResolutionError",
    "CollectionError",
    "UpstreamFetchError",
    "ParseError",
    "CacheWriteError",
]
