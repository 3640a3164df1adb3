"""
Error taxonomy for the stats pipeline.
"""
from typing import Optional


class StatsServiceError(Exception):
    """Base class for all stats pipeline errors."""


class ConfigurationError(StatsServiceError):
    """A required credential or store setting is missing."""


class UpstreamError(StatsServiceError):
    """Upstream provider unreachable or returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(StatsServiceError):
    """Upstream returned a body we could not interpret."""


class CacheStoreError(StatsServiceError):
    """
    Persistent cache store unavailable or erroring.

    Never surfaced to callers: the tiered cache downgrades it to a miss.
    """
