"""POI exporters."""

from .files import save_to_csv, save_to_json

__all__ = ["save_to_csv", "save_to_json"]
