"""TTL cache over a key-value store, keyed by request content."""

import json
import logging
import time
from typing import Any, Callable, List, Mapping, Optional

from ..core.exceptions import CacheStoreError
from ..core.models import CacheEntry
from .store import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "geopoio-"

DEFAULT_TTL_SECONDS = 24 * 60 * 60

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _serialize_param(param: Any) -> str:
    if isinstance(param, (Mapping, list, tuple)):
        return json.dumps(param, sort_keys=True, separators=(",", ":"), default=str)
    return str(param)


def rolling_hash(text: str) -> str:
    """
    32-bit rolling string hash (``h = h * 31 + c``) rendered in base 36.

    Collisions are possible in a 32-bit space; keys are only a cache
    lookup aid, never an identity.
    """
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    h = abs(h)

    if h == 0:
        return "0"
    digits = []
    while h:
        h, rem = divmod(h, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class CacheLayer:
    """
    Content-addressed TTL cache.

    Entries are stored as JSON ``{payload, createdAt, expiresAt}``. Store
    and serialization failures never reach the caller: reads degrade to a
    miss and writes to a no-op, with a warning in the log.
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 default_ttl: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        """
        Initialize CacheLayer.

        Args:
            store: Key-value substrate (in-memory if None)
            default_ttl: TTL in seconds used when ``set`` gets none
            clock: Function returning the current time in seconds
        """
        self.store = store if store is not None else MemoryStore(clock=clock)
        self.default_ttl = default_ttl
        self.clock = clock

    @staticmethod
    def key(namespace: str, *params: Any) -> str:
        """
        Derive a deterministic cache key from request parameters.

        Args:
            namespace: Key namespace, e.g. ``overpass-pois``
            *params: Values identifying the request; mappings and sequences
                are serialized as canonical JSON

        Returns:
            Key of the form ``geopoio-<namespace>-<hash>``
        """
        param_string = "-".join(_serialize_param(p) for p in params)
        return f"{KEY_PREFIX}{namespace}-{rolling_hash(param_string)}"

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None if absent, expired or unreadable."""
        try:
            raw = await self.store.get(key)
        except (CacheStoreError, OSError) as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        if raw is None:
            logger.debug("Cache miss: %s", key)
            return None

        entry = self._decode(key, raw)
        if entry is None:
            await self.evict(key)
            return None

        logger.debug("Cache hit: %s", key)
        return entry.payload

    def _decode(self, key: str, raw: str) -> Optional[CacheEntry]:
        """Parse a stored entry; None if it is unreadable or expired."""
        try:
            entry = CacheEntry.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

        if not entry.is_valid(self.clock()):
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """
        Store a payload, overwriting any existing entry.

        Returns:
            True if the entry was written, False if the write was skipped
        """
        ttl = self.default_ttl if ttl is None else ttl
        now = self.clock()
        entry = CacheEntry(payload=value, created_at=now, expires_at=now + ttl)

        try:
            raw = json.dumps(entry.to_dict())
        except (TypeError, ValueError) as e:
            logger.warning("Could not serialize cache entry %s: %s", key, e)
            return False

        try:
            await self.store.set(key, raw, ttl)
        except (CacheStoreError, OSError) as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False

        logger.debug("Cached %s (%d bytes, ttl %ss)", key, len(raw), ttl)
        return True

    async def evict(self, key: str) -> None:
        try:
            await self.store.remove(key)
        except (CacheStoreError, OSError) as e:
            logger.warning("Cache eviction failed for %s: %s", key, e)

    async def clear(self, namespace: Optional[str] = None) -> int:
        """
        Remove cached entries belonging to this package.

        Args:
            namespace: Only clear keys of this namespace; all ``geopoio-``
                keys if None. Unrelated keys in a shared store are kept.

        Returns:
            Number of entries removed
        """
        prefix = self._prefix(namespace)
        keys = await self._keys(prefix)
        for key in keys:
            await self.evict(key)
        logger.info("Cleared %d cache entries with prefix %s", len(keys), prefix)
        return len(keys)

    async def purge_expired(self, namespace: Optional[str] = None) -> int:
        """
        Remove expired and unreadable entries, keeping valid ones.

        Stores that ignore ``ttl`` (such as FileStore) only drop an expired
        entry when its key is read again; this sweeps them all at once.

        Args:
            namespace: Only sweep keys of this namespace; all ``geopoio-``
                keys if None

        Returns:
            Number of entries removed
        """
        prefix = self._prefix(namespace)
        removed = 0
        for key in await self._keys(prefix):
            try:
                raw = await self.store.get(key)
            except (CacheStoreError, OSError) as e:
                logger.warning("Cache read failed for %s: %s", key, e)
                continue
            if raw is not None and self._decode(key, raw) is None:
                await self.evict(key)
                removed += 1

        logger.info("Purged %d expired cache entries with prefix %s", removed, prefix)
        return removed

    @staticmethod
    def _prefix(namespace: Optional[str]) -> str:
        return KEY_PREFIX if namespace is None else f"{KEY_PREFIX}{namespace}-"

    async def _keys(self, prefix: str) -> List[str]:
        try:
            return await self.store.keys(prefix)
        except (CacheStoreError, OSError) as e:
            logger.warning("Could not list cache keys for %s: %s", prefix, e)
            return []
