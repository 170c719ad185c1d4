"""Core foundation classes: backend transport, geocoding and coordinate math.

- HttpClient / ApiError: JSON client for the REST backend
- Geocoder: Forward/reverse geocoding (Nominatim-compatible)
- LivenessToken: Drops late results for views that are gone
- GeoCalculator: Distances and coordinate validity
"""

from heritage_atlas.core.cancellation import LivenessToken
from heritage_atlas.core.geo_calculator import GeoCalculator
from heritage_atlas.core.geocoding import Geocoder, GeocodingResult
from heritage_atlas.core.http import ApiError, HttpClient, build_query

__all__ = [
    "ApiError",
    "HttpClient",
    "build_query",
    "Geocoder",
    "GeocodingResult",
    "LivenessToken",
    "GeoCalculator",
]
