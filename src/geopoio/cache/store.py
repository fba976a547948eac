"""Key-value substrates backing the POI cache."""

import asyncio
import hashlib
import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import CacheStoreError


class KeyValueStore(ABC):
    """
    Minimal async key-value interface.

    Values are strings. ``ttl`` (seconds) lets a store expire entries on its
    own; the cache layer also tracks expiry itself, so stores may ignore it.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any existing value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> List[str]:
        """List keys starting with ``prefix``."""


class MemoryStore(KeyValueStore):
    """In-process store, used for tests and short-lived sessions."""

    def __init__(self, clock=time.time):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._data if k.startswith(prefix)]

    def __len__(self):
        return len(self._data)


class FileStore(KeyValueStore):
    """
    Persistent store keeping one JSON file per key in a directory.

    File names are a digest of the key; the key itself is kept inside the
    file so prefix listing works. Disk access runs in a worker thread.
    """

    def __init__(self, cache_dir: str = "data/cache"):
        self.cache_dir = Path(cache_dir)

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{hashlib.md5(key.encode('utf-8')).hexdigest()}.json"

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    async def keys(self, prefix: str = "") -> List[str]:
        return await asyncio.to_thread(self._list, prefix)

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CacheStoreError(f"Could not read cache file {path}: {e}")
        if not isinstance(record, dict) or record.get("key") != key:
            return None
        return record.get("value")

    def _write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps({"key": key, "value": value}), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise CacheStoreError(f"Could not write cache file {path}: {e}")

    def _delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise CacheStoreError(f"Could not remove cache entry {key}: {e}")

    def _list(self, prefix: str) -> List[str]:
        if not self.cache_dir.exists():
            return []

        keys = []
        for cache_file in self.cache_dir.glob("*.json"):
            try:
                record = json.loads(cache_file.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                continue
            key = record.get("key") if isinstance(record, dict) else None
            if isinstance(key, str) and key.startswith(prefix):
                keys.append(key)
        return keys
