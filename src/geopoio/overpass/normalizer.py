"""Map raw Overpass elements to POIs."""

import logging
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional

from ..core import Config
from ..core.models import POI, Coordinate

logger = logging.getLogger(__name__)

ID_PREFIX = "poi-"


class ResponseNormalizer:
    """Turn Overpass ``elements`` into POIs, one category per element."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def classify(self, tags: Optional[Mapping[str, Any]]) -> Optional[str]:
        """
        Pick the category of an element from its tags.

        Categories are tried in configured priority order and the first
        matching tag predicate wins.

        Returns:
            Category name, or None if no predicate matches
        """
        if not tags:
            return None

        for category, filters in self.config.get_categories().items():
            for key, values in filters.items():
                if tags.get(key) in values:
                    return category
        return None

    def normalize(self, elements: Iterable[Any], categories: Iterable[str]) -> List[POI]:
        """
        Convert raw elements to POIs.

        Elements without usable coordinates, without a requested category or
        repeating an id already seen are skipped. Output order follows input
        order.

        Args:
            elements: The ``elements`` list of an Overpass JSON response
            categories: Requested category names

        Returns:
            List of POIs
        """
        requested = {str(c) for c in categories}
        pois = []
        seen = set()
        skipped = 0

        for element in elements:
            poi = self._to_poi(element, requested)
            if poi is None or poi.id in seen:
                skipped += 1
                continue
            seen.add(poi.id)
            pois.append(poi)

        if skipped:
            logger.debug("Skipped %d of %d elements", skipped, len(pois) + skipped)
        return pois

    def _to_poi(self, element: Any, requested) -> Optional[POI]:
        if not isinstance(element, Mapping):
            return None

        lat = element.get("lat")
        lon = element.get("lon")
        if not _is_number(lat) or not _is_number(lon):
            return None
        if element.get("id") is None:
            return None

        tags = element.get("tags")
        if not isinstance(tags, Mapping):
            tags = {}

        category = self.classify(tags)
        if category is None or category not in requested:
            return None

        return POI(
            id=f"{ID_PREFIX}{element['id']}",
            coordinate=Coordinate(float(lon), float(lat)),
            category=category,
            name=tags.get("name"),
            tags={str(k): str(v) for k, v in tags.items()},
        )


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)
