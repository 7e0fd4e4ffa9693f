"""Geo helpers: great-circle distance and display-only neighborhood names."""

from __future__ import annotations

import math

from moodmap.models.common import Location

EARTH_RADIUS_MILES = 3959.0

NEIGHBORHOOD_NAMES: tuple[str, ...] = (
    "Downtown",
    "Midtown",
    "Uptown",
    "East Side",
    "West Side",
    "North End",
    "South End",
    "Riverside",
    "Parkside",
    "Harbor District",
)


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two lat/lng points in miles."""
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def neighborhood_name(location: Location) -> str:
    """Stable label for a coordinate. Not a real geographic lookup."""
    index = abs(math.floor(location.lat * 100 + location.lng * 100)) % len(NEIGHBORHOOD_NAMES)
    return NEIGHBORHOOD_NAMES[index]
