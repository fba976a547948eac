"""Orchestrate cached, single-flight POI retrieval along a route."""

import asyncio
import logging
import time
from typing import Iterable, List, Optional, Sequence

from ..cache import CacheLayer
from ..core import Config, geo
from ..core.exceptions import RequestCancelled
from ..core.models import (
    POI,
    Coordinate,
    PendingRequest,
    RetrievalOutcome,
    RetrievalResult,
)
from ..overpass import OverpassClient, QueryBuilder, ResponseNormalizer

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "overpass-pois"


class RetrievalCoordinator:
    """
    Fetch POIs near a route through the cache and the Overpass service.

    At most one Overpass request is outstanding per instance. A call that
    misses the cache cancels the previous request; the superseded call
    returns an empty, uncached result, and any response that still arrives
    for it is discarded because its PendingRequest is no longer current.
    """

    def __init__(self, config: Optional[Config] = None,
                 client: Optional[OverpassClient] = None,
                 cache: Optional[CacheLayer] = None):
        """
        Initialize RetrievalCoordinator.

        Args:
            config: Configuration object (uses defaults if None)
            client: Overpass transport; anything with an async
                ``query(payload, token)`` method works
            cache: Cache layer (in-memory if None)
        """
        self.config = config or Config()
        self.client = client or OverpassClient(self.config)
        self.cache = cache or CacheLayer(default_ttl=self.config.cache_ttl_seconds)
        self.query_builder = QueryBuilder(self.config)
        self.normalizer = ResponseNormalizer(self.config)
        self._pending: Optional[PendingRequest] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel_pending(self) -> bool:
        """Cancel the outstanding request, if any. Returns True if one was cancelled."""
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        logger.info("Cancelling previous request")
        pending.cancel()
        return True

    async def fetch_pois_along_route(self, route: Sequence[Sequence[float]],
                                     buffer_distance_m: float,
                                     categories: Optional[Iterable[str]] = None) -> List[POI]:
        """
        Fetch POIs within ``buffer_distance_m`` of a route.

        An empty list means either that nothing was found or that the
        retrieval failed or was superseded; use :meth:`retrieve` to tell
        these apart.

        Args:
            route: Ordered (lon, lat) coordinates; a single coordinate means
                a "near me" search
            buffer_distance_m: Maximum distance in meters from the route
            categories: Requested category names (all configured if None)

        Returns:
            List of POIs in Overpass response order
        """
        result = await self.retrieve(route, buffer_distance_m, categories)
        return result.pois

    async def fetch_pois_near(self, coordinate: Sequence[float],
                              distance_m: Optional[float] = None,
                              categories: Optional[Iterable[str]] = None) -> List[POI]:
        """Fetch POIs around a single (lon, lat) location."""
        if distance_m is None:
            distance_m = self.config.get_distance("near_me")
        return await self.fetch_pois_along_route([coordinate], distance_m, categories)

    async def retrieve(self, route: Sequence[Sequence[float]],
                       buffer_distance_m: float,
                       categories: Optional[Iterable[str]] = None) -> RetrievalResult:
        """Run the retrieval pipeline and report how it ended."""
        if not route:
            logger.debug("No coordinates provided, skipping POI fetch")
            return RetrievalResult(RetrievalOutcome.EMPTY_ROUTE)

        # Copy so later changes to the caller's list cannot leak in
        points = tuple(Coordinate(float(c[0]), float(c[1])) for c in route)
        if categories is None:
            categories = self.config.get_category_list()
        categories = [str(c) for c in categories]

        # Categories are fixed per deployment and not part of the key.
        # 2000 and 2000.0 must map to the same key.
        buffer_distance_m = float(buffer_distance_m)
        cache_key = self.cache.key(CACHE_NAMESPACE, [list(p) for p in points], buffer_distance_m)
        pois = await self._cached_pois(cache_key)
        if pois is not None:
            logger.info("Using cached POI data: %d POIs", len(pois))
            return RetrievalResult(RetrievalOutcome.CACHED, pois)

        self.cancel_pending()

        bbox = geo.bounding_box(points, buffer_distance_m)
        payload = self.query_builder.build(categories, bbox)
        logger.info(
            "Fetching POIs for %d coordinates with %sm buffer (bbox %s)",
            len(points), buffer_distance_m, bbox.as_overpass(),
        )

        pending = PendingRequest()
        self._pending = pending
        pending.task = asyncio.ensure_future(self.client.query(payload, pending.token))

        started = time.monotonic()
        try:
            elements = await pending.task
        except (asyncio.CancelledError, RequestCancelled):
            if pending.cancelled:
                logger.info("Request was superseded, discarding it")
                return RetrievalResult(RetrievalOutcome.CANCELLED)
            # Our own caller was cancelled
            pending.token.cancel()
            self._release(pending)
            raise
        except Exception as e:
            if pending.cancelled or self._pending is not pending:
                logger.info("Superseded request ended with %s, discarding it", type(e).__name__)
                return RetrievalResult(RetrievalOutcome.CANCELLED)
            self._release(pending)
            logger.warning("Error fetching POIs: %s", e)
            return RetrievalResult(RetrievalOutcome.FAILED, error=str(e))

        if self._pending is not pending:
            logger.info("Discarding response of a superseded request")
            return RetrievalResult(RetrievalOutcome.CANCELLED)
        self._release(pending)

        logger.debug("Overpass response time: %.0fms", (time.monotonic() - started) * 1000)

        pois = self.normalizer.normalize(elements, categories)
        filtered = [p for p in pois if geo.within_buffer(p.coordinate, points, buffer_distance_m)]
        logger.info("Filtered POIs within buffer: %d of %d", len(filtered), len(pois))

        await self.cache.set(cache_key, [p.to_dict() for p in filtered])
        return RetrievalResult(RetrievalOutcome.OK, filtered)

    async def _cached_pois(self, cache_key: str) -> Optional[List[POI]]:
        cached = await self.cache.get(cache_key)
        if cached is None:
            return None
        try:
            return [POI.from_dict(item) for item in cached]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed cached POIs %s: %s", cache_key, e)
            await self.cache.evict(cache_key)
            return None

    def _release(self, pending: PendingRequest) -> None:
        if self._pending is pending:
            self._pending = None

    async def clear_cache(self) -> int:
        """Remove every cached POI result."""
        return await self.cache.clear(CACHE_NAMESPACE)
