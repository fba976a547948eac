"""Shared fixtures for GeoPOIO tests."""

import asyncio

import pytest

from geopoio.cache import CacheLayer, MemoryStore


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class ScriptedOverpassClient:
    """
    Stand-in for OverpassClient that answers calls from a script.

    Each script entry is a dict with ``elements`` and optionally ``error``
    (raised instead of answering), ``gate`` (an asyncio.Event the call waits
    on) and ``ignore_cancel`` (answer even when cancelled while waiting).
    """

    def __init__(self, *script):
        self.script = list(script)
        self.payloads = []
        self.tokens = []
        self.waiting = asyncio.Event()

    @property
    def calls(self):
        return len(self.payloads)

    async def query(self, payload, token=None):
        self.payloads.append(payload)
        self.tokens.append(token)
        step = self.script.pop(0) if self.script else {"elements": []}

        gate = step.get("gate")
        if gate is not None:
            self.waiting.set()
            try:
                await gate.wait()
            except asyncio.CancelledError:
                if not step.get("ignore_cancel"):
                    raise

        if step.get("error") is not None:
            raise step["error"]
        return list(step.get("elements", []))

    def close(self):
        pass


def element(element_id, lon, lat, **tags):
    return {"type": "node", "id": element_id, "lat": lat, "lon": lon, "tags": tags}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def cache(store, clock):
    return CacheLayer(store, clock=clock)


@pytest.fixture
def berlin_elements():
    """Three POIs around (13.0, 52.0); the last one is about 1.1 km away."""
    return [
        element(1, 13.001, 52.0, amenity="drinking_water"),
        element(2, 13.0, 52.003, amenity="restaurant", name="Zur Linde"),
        element(3, 13.01, 52.0, amenity="fuel", name="Far Fuel"),
    ]


@pytest.fixture
def make_element():
    return element


@pytest.fixture
def scripted_client():
    return ScriptedOverpassClient
