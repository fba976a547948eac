"""Overpass QL query construction."""

from typing import Iterable, List, Optional

from ..core import Config
from ..core.models import BoundingBox


class QueryBuilder:
    """
    Translate requested POI categories and a bounding box into Overpass QL.

    Stateless: the same categories and box always produce the same text.
    Categories are emitted in the configured priority order, and categories
    the configuration does not know are silently left out.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def build(self, categories: Iterable[str], bbox: BoundingBox) -> str:
        """
        Build the query payload.

        Args:
            categories: Requested category names
            bbox: Area to search

        Returns:
            Overpass QL query text
        """
        requested = {str(c) for c in categories}
        area = bbox.as_overpass()

        clauses = []
        for category, filters in self.config.get_categories().items():
            if category not in requested:
                continue
            clauses.append(self._category_clause(filters, area))

        body = "\n".join(clauses)
        return (
            f"[out:json][timeout:{self.config.server_timeout}];\n"
            f"(\n{body}\n);\n"
            "out geom;\n"
        )

    @staticmethod
    def _category_clause(filters, area: str) -> str:
        lines: List[str] = []
        for key, values in filters.items():
            for value in values:
                lines.append(f'  node["{key}"="{value}"]({area});')
        return "\n".join(lines)
