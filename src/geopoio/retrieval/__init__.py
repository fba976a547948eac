"""Cached, single-flight POI retrieval."""

from .coordinator import RetrievalCoordinator, CACHE_NAMESPACE

__all__ = ["RetrievalCoordinator", "CACHE_NAMESPACE"]
