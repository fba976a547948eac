"""Tests for the TTL cache layer and its stores."""

import json

import pytest

from geopoio.cache import CacheLayer, FileStore, MemoryStore, rolling_hash
from geopoio.core.exceptions import CacheStoreError

ROUTE = [[13.0, 52.0], [13.1, 52.05]]


class BrokenStore(MemoryStore):
    async def get(self, key):
        raise CacheStoreError("store offline")

    async def set(self, key, value, ttl=None):
        raise OSError("disk full")

    async def keys(self, prefix=""):
        raise CacheStoreError("store offline")


def test_key_is_deterministic_and_namespaced():
    key = CacheLayer.key("overpass-pois", ROUTE, 500)
    assert key == CacheLayer.key("overpass-pois", [list(p) for p in ROUTE], 500)
    assert key.startswith("geopoio-overpass-pois-")
    assert key.rsplit("-", 1)[1].isalnum()


def test_key_changes_with_parameters():
    base = CacheLayer.key("overpass-pois", ROUTE, 500)
    assert CacheLayer.key("overpass-pois", ROUTE, 501) != base
    assert CacheLayer.key("overpass-pois", [[13.0, 52.0], [13.1, 52.06]], 500) != base
    assert CacheLayer.key("other", ROUTE, 500) != base


def test_key_serializes_mappings_canonically():
    assert CacheLayer.key("app", {"a": 1, "b": 2}) == CacheLayer.key("app", {"b": 2, "a": 1})


def test_rolling_hash_is_32_bit_base36():
    assert rolling_hash("") == "0"
    assert rolling_hash("a") == "2p"  # 97 in base 36
    # "ab" -> 97 * 31 + 98 = 3105
    assert rolling_hash("ab") == "2e9"
    long_hash = rolling_hash("x" * 10000)
    assert int(long_hash, 36) <= 2 ** 31


@pytest.mark.asyncio
async def test_set_then_get_returns_payload(cache):
    await cache.set("geopoio-test-1", [{"id": "poi-1"}])
    assert await cache.get("geopoio-test-1") == [{"id": "poi-1"}]
    assert await cache.get("geopoio-test-missing") is None


@pytest.mark.asyncio
async def test_entry_expires_at_ttl_and_is_evicted(clock, tmp_path):
    store = FileStore(tmp_path)
    cache = CacheLayer(store, clock=clock)
    await cache.set("geopoio-test-ttl", {"v": 1}, ttl=60)

    clock.advance(59)
    assert await cache.get("geopoio-test-ttl") == {"v": 1}

    clock.advance(1)
    assert await cache.get("geopoio-test-ttl") is None
    assert await store.get("geopoio-test-ttl") is None
    assert await store.keys("geopoio-") == []


@pytest.mark.asyncio
async def test_default_ttl_is_24_hours(cache, store, clock):
    await cache.set("geopoio-test-day", "x")
    entry = json.loads(await store.get("geopoio-test-day"))
    assert entry["expiresAt"] - entry["createdAt"] == 24 * 60 * 60
    assert entry["createdAt"] == clock()


@pytest.mark.asyncio
async def test_set_overwrites_existing_entry(cache):
    await cache.set("geopoio-test-k", "old")
    await cache.set("geopoio-test-k", "new")
    assert await cache.get("geopoio-test-k") == "new"


@pytest.mark.asyncio
async def test_unreadable_entry_is_a_miss_and_removed(cache, store):
    await store.set("geopoio-test-bad", "{not json")
    assert await cache.get("geopoio-test-bad") is None
    assert await store.get("geopoio-test-bad") is None


@pytest.mark.asyncio
async def test_unserializable_value_is_not_written(cache, store):
    assert await cache.set("geopoio-test-obj", object()) is False
    assert await store.keys() == []


@pytest.mark.asyncio
async def test_store_failures_degrade_to_no_cache(caplog):
    cache = CacheLayer(BrokenStore())
    assert await cache.set("geopoio-test-k", "v") is False
    assert await cache.get("geopoio-test-k") is None
    assert await cache.clear() == 0
    assert await cache.purge_expired() == 0
    assert "disk full" in caplog.text


@pytest.mark.asyncio
async def test_clear_is_scoped_by_prefix(cache, store):
    await cache.set(CacheLayer.key("overpass-pois", ROUTE, 100), [])
    await cache.set(CacheLayer.key("gpx", "tracks"), [])
    await store.set("someone-else", "keep me")

    assert await cache.clear("overpass-pois") == 1
    assert sorted(await store.keys()) == [CacheLayer.key("gpx", "tracks"), "someone-else"]

    assert await cache.clear() == 1
    assert await store.keys() == ["someone-else"]


@pytest.mark.asyncio
async def test_purge_expired_keeps_valid_entries(clock, tmp_path):
    store = FileStore(tmp_path)
    cache = CacheLayer(store, clock=clock)
    await cache.set(CacheLayer.key("overpass-pois", ROUTE, 100), [], ttl=60)
    await cache.set(CacheLayer.key("overpass-pois", ROUTE, 200), [], ttl=3600)
    await cache.set(CacheLayer.key("gpx", "tracks"), [], ttl=60)
    await store.set("geopoio-overpass-pois-bad", "{not json")

    clock.advance(120)

    assert await cache.purge_expired("overpass-pois") == 2
    assert sorted(await store.keys()) == sorted([
        CacheLayer.key("overpass-pois", ROUTE, 200),
        CacheLayer.key("gpx", "tracks"),
    ])
    assert await cache.purge_expired() == 1
    assert await store.keys() == [CacheLayer.key("overpass-pois", ROUTE, 200)]

@pytest.mark.asyncio
async def test_evict_removes_entry(cache):
    await cache.set("geopoio-test-e", 1)
    await cache.evict("geopoio-test-e")
    await cache.evict("geopoio-test-never-set")
    assert await cache.get("geopoio-test-e") is None


@pytest.mark.asyncio
async def test_memory_store_honours_ttl(clock):
    store = MemoryStore(clock=clock)
    await store.set("k", "v", ttl=10)
    await store.set("forever", "v")
    clock.advance(10)
    assert await store.get("k") is None
    assert await store.get("forever") == "v"
    assert len(store) == 1


@pytest.mark.asyncio
async def test_file_store_persists_across_instances(tmp_path):
    await FileStore(tmp_path).set("geopoio-a", "value")
    reopened = FileStore(tmp_path)
    assert await reopened.get("geopoio-a") == "value"
    assert await reopened.keys("geopoio-") == ["geopoio-a"]

    await reopened.remove("geopoio-a")
    await reopened.remove("geopoio-a")
    assert await reopened.get("geopoio-a") is None


@pytest.mark.asyncio
async def test_file_store_reports_corrupt_files(tmp_path):
    store = FileStore(tmp_path)
    await store.set("geopoio-a", "value")
    store._path("geopoio-a").write_text("garbage", encoding="utf-8")

    with pytest.raises(CacheStoreError):
        await store.get("geopoio-a")
    assert await store.keys() == []
    assert await CacheLayer(store).get("geopoio-a") is None


@pytest.mark.asyncio
async def test_file_store_on_missing_directory(tmp_path):
    store = FileStore(tmp_path / "not" / "yet")
    assert await store.get("geopoio-a") is None
    assert await store.keys() == []
