"""Write retrieved POIs to CSV and JSON files."""

import csv
import json
from pathlib import Path
from typing import List, Optional, Sequence

from ..core import geo
from ..core.models import POI, Coordinate

CSV_FIELDS = ['id', 'category', 'name', 'lat', 'lon', 'amenity', 'distance_to_route']


def save_to_csv(pois: List[POI], output_file: str,
                reference_route: Optional[Sequence[Coordinate]] = None) -> str:
    """
    Save POIs to CSV file.

    Args:
        pois: POIs to write
        output_file: Path to output CSV file
        reference_route: Route the POIs were searched along; when given,
            the distance of each POI to it is written as well

    Returns:
        Path to output file
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()

        for poi in pois:
            distance = ''
            if reference_route:
                distance = int(geo.distance_from_route(poi.coordinate, reference_route))
            writer.writerow({
                'id': poi.id,
                'category': poi.category,
                'name': poi.name or '',
                'lat': poi.lat,
                'lon': poi.lon,
                'amenity': poi.amenity or '',
                'distance_to_route': distance,
            })

    return str(output_path)


def save_to_json(pois: List[POI], output_file: str) -> str:
    """Save POIs as a JSON list of objects."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump([poi.to_dict() for poi in pois], f, ensure_ascii=False, indent=2)

    return str(output_path)
