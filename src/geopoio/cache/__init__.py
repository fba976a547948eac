"""TTL cache for retrieval results."""

from .layer import CacheLayer, DEFAULT_TTL_SECONDS, KEY_PREFIX, rolling_hash
from .store import KeyValueStore, MemoryStore, FileStore

__all__ = [
    "CacheLayer",
    "DEFAULT_TTL_SECONDS",
    "KEY_PREFIX",
    "rolling_hash",
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
]
