"""Overpass API query building, transport and response normalization."""

from .query import QueryBuilder
from .normalizer import ResponseNormalizer
from .client import OverpassClient

__all__ = ["QueryBuilder", "ResponseNormalizer", "OverpassClient"]
