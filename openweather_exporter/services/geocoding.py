from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple

import requests
import structlog

from ..errors import ResolutionError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Location:
    """A configured location with its resolved coordinates.

    Built once at startup and shared read-only by every scrape.
    """

    name: str
    latitude: float
    longitude: float

    def cache_key(self, source: str) -> str:
        return f"{source}|{self.latitude:.4f},{self.longitude:.4f}|{self.name}"


class Geocoder(Protocol):
    def geocode(self, query: str) -> Tuple[float, float]:
        """Return ``(latitude, longitude)`` for a free-form place name.

        Raises ``ResolutionError`` when the place cannot be resolved.
        """
        ...


@dataclass
class NominatimGeocoder:
    """OpenStreetMap Nominatim search client.

    Nominatim's usage policy requires an identifying User-Agent; only the
    best match (``limit=1``) is requested.
    """

    base_url: str = "https://nominatim.openstreetmap.org"
    timeout: float = 10.0
    user_agent: str = "Openweather_Exporter"
    session: Optional[requests.Session] = None

    def geocode(self, query: str) -> Tuple[float, float]:
        params = {"q": query, "format": "json", "limit": 1}
        headers = {"User-Agent": self.user_agent}
        session = self.session or requests.Session()
        try:
            resp = session.get(
                f"{self.base_url.rstrip('/')}/search",
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            results = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ResolutionError(f"geocoding {query!r} failed: {e}") from e

        if not isinstance(results, list) or not results:
            raise ResolutionError(f"no geocoding result for {query!r}")
        try:
            return float(results[0]["lat"]), float(results[0]["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise ResolutionError(f"malformed geocoding result for {query!r}: {e}") from e


def resolve_locations(names: Iterable[str], geocoder: Geocoder) -> List[Location]:
    locations = []
    for name in names:
        lat, lon = geocoder.geocode(name)
        logger.info("location_resolved", location=name, latitude=lat, longitude=lon)
        locations.append(Location(name=name, latitude=lat, longitude=lon))
    return locations
