"""GeoJSON FeatureCollection of located Notion pages."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from notion_forge.notion.properties import PropertyKind, decode, first_title, parse_property_bag


def parse_coords(raw: str) -> Optional[tuple[float, float]]:
    """Parse "lat, lon" into (lat, lon); anything else gives None."""
    parts = [p.strip() for p in (raw or "").split(",")]
    if len(parts) != 2:
        return None
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


def pages_to_feature_collection(
    pages: Iterable[dict],
    title_prop: Optional[str] = None,
    start_prop: str = "Start",
    end_prop: str = "End",
    location_prop: str = "Location",
    coords_prop: str = "LocationCoords",
    url_prop: str = "URL",
) -> dict:
    features = []
    for page in pages:
        bag = parse_property_bag(page.get("properties"))

        coords_raw = decode(bag, coords_prop, PropertyKind.RICH_TEXT) or decode(
            bag, coords_prop, PropertyKind.FORMULA
        )
        coords = parse_coords(coords_raw)
        if coords is None:
            continue
        lat, lon = coords

        title = decode(bag, title_prop, PropertyKind.TITLE) if title_prop else ""
        title = title or first_title(bag) or "Untitled"
        location = decode(bag, location_prop, PropertyKind.RICH_TEXT) or decode(
            bag, location_prop, PropertyKind.TITLE
        )
        start_date = decode(bag, start_prop, PropertyKind.DATE)
        end_date = decode(bag, end_prop, PropertyKind.DATE)

        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [lon, lat]},
                "properties": {
                    "id": page.get("id"),
                    "name": title,
                    "location": location,
                    "url": decode(bag, url_prop, PropertyKind.URL) or page.get("url"),
                    "start": start_date.start if start_date else None,
                    "end": (end_date.start if end_date else None)
                    or (start_date.end if start_date else None),
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}
