"""Forward and reverse geocoding against a Nominatim-compatible API.

Used by the registration location picker:
- search(query): address text -> up to SEARCH_LIMIT candidate places
- reverse(lat, lon): picked point -> formatted address (or None)

Every request identifies the application with a custom User-Agent, as the
public Nominatim usage policy requires.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from heritage_atlas.constants import GeocodingConfig
from heritage_atlas.core.http import NETWORK_ERROR_MESSAGE, ApiError, build_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodingResult:
    """One search hit."""

    place_id: int
    display_name: str
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeocodingResult":
        return cls(
            place_id=int(data.get("place_id", 0)),
            display_name=str(data.get("display_name", "")),
            lat=float(data["lat"]),
            lon=float(data["lon"]),
        )


def format_address(data: dict[str, Any]) -> Optional[str]:
    """Join address components (state, city/town/village, suburb, ...) in order.

    Falls back to display_name when no component is present.
    """
    address = data.get("address") or {}
    parts: list[str] = []
    for part in GeocodingConfig.ADDRESS_PARTS:
        keys = part if isinstance(part, tuple) else (part,)
        value = next((address[k] for k in keys if address.get(k)), None)
        if value:
            parts.append(str(value))
    if parts:
        return "".join(parts)
    return data.get("display_name") or None


class Geocoder:
    """Nominatim client.

    Example:
        geocoder = Geocoder()
        results = geocoder.search("浅草寺")
        address = geocoder.reverse(lat=35.7148, lon=139.7967)
    """

    def __init__(
        self,
        base_url: str = GeocodingConfig.BASE_URL,
        session: Optional[requests.Session] = None,
        timeout_s: float = GeocodingConfig.TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout_s = timeout_s

    def _get(self, endpoint: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.get(
                url,
                params=build_query(params),
                headers={"User-Agent": GeocodingConfig.USER_AGENT},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            raise ApiError(status, {"message": f"Geocoding {endpoint} failed"}, f"HTTP {status}") from e
        except requests.RequestException as e:
            raise ApiError(0, {"message": NETWORK_ERROR_MESSAGE}, "Network Error") from e
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, response.text, "Invalid geocoding response") from e

    def search(self, query: str) -> list[GeocodingResult]:
        """Find places matching query (country- and language-restricted).

        Raises:
            ApiError: Request failed
        """
        if not query.strip():
            return []
        data = self._get(
            "search",
            {
                "format": "json",
                "q": query.strip(),
                "countrycodes": GeocodingConfig.COUNTRY_CODES,
                "limit": GeocodingConfig.SEARCH_LIMIT,
                "accept-language": GeocodingConfig.LANGUAGE,
            },
        )
        results = []
        for item in data or []:
            try:
                results.append(GeocodingResult.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning(f"[GEOCODE] Skipping malformed search result: {item}")
        logger.info(f"[GEOCODE] '{query}' -> {len(results)} result(s)")
        return results[: GeocodingConfig.SEARCH_LIMIT]

    def reverse(self, lat: float, lon: float) -> Optional[str]:
        """Formatted address at (lat, lon), or None when the lookup fails."""
        try:
            data = self._get(
                "reverse",
                {
                    "format": "json",
                    "lat": lat,
                    "lon": lon,
                    "zoom": GeocodingConfig.REVERSE_ZOOM,
                    "addressdetails": 1,
                    "accept-language": GeocodingConfig.LANGUAGE,
                },
            )
        except ApiError as e:
            logger.warning(f"[GEOCODE] Reverse lookup failed at ({lat:.5f}, {lon:.5f}): {e}")
            return None
        if not isinstance(data, dict) or not data.get("display_name"):
            return None
        return format_address(data)
