"""Exceptions raised inside the POI retrieval pipeline."""

from typing import Optional


class GeoPOIOError(Exception):
    """Base class for all GeoPOIO errors."""


class ConfigError(GeoPOIOError):
    """Raised when a configuration file has invalid values."""


class OverpassError(GeoPOIOError):
    """Raised when the Overpass service fails or returns an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RequestCancelled(GeoPOIOError):
    """Raised by the transport when a superseded request notices its token."""


class CacheStoreError(GeoPOIOError):
    """Raised by a key-value store when it cannot read or write an entry."""
