"""Geodesic helpers for map views.

- Distance calculation (Haversine formula)
- Coordinate validity checks
- Center of a set of points (for fitting the initial view)

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

import math
from collections.abc import Iterable
from math import atan2, cos, radians, sin, sqrt
from typing import Optional

from heritage_atlas.constants import MapConfig

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for coordinate math.

    Coordinates are in decimal degrees (WGS84). Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
        """True for finite, in-range, non-(0, 0) coordinates.

        (0, 0) is the backend's "unset" location and never a real site.
        """
        if lat is None or lon is None:
            return False
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        if lat == 0 and lon == 0:
            return False
        lat_min, lat_max = MapConfig.LAT_RANGE
        lon_min, lon_max = MapConfig.LON_RANGE
        return lat_min <= lat <= lat_max and lon_min <= lon <= lon_max

    @staticmethod
    def center_of(points: Iterable[tuple[float, float]]) -> Optional[tuple[float, float]]:
        """Arithmetic mean (lat, lon) of points, None when empty.

        Good enough for city-scale collections; not meant for antimeridian spans.
        """
        lats: list[float] = []
        lons: list[float] = []
        for lat, lon in points:
            lats.append(lat)
            lons.append(lon)
        if not lats:
            return None
        return (sum(lats) / len(lats), sum(lons) / len(lons))
