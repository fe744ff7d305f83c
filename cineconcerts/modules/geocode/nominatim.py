import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from cineconcerts.config import GeocodeConfig
from cineconcerts.errors import GeocodeUnavailableError

logger = logging.getLogger("cineconcerts.geocode")


@dataclass(frozen=True)
class GeoResult:
    """A resolved location."""

    lat: float
    lng: float
    display_name: str


class NominatimGeocoder:
    """Resolves free-text locations through the Nominatim search API."""

    def __init__(self, client: httpx.AsyncClient, config: GeocodeConfig):
        self.client = client
        self.config = config

    async def geocode(self, location: str) -> Optional[GeoResult]:
        """
        Resolve a city, address or landmark to coordinates.

        Returns:
            The best match, or None when the service has no match or
            answers with a non-success status

        Raises:
            GeocodeUnavailableError: network failure or malformed response
        """
        params = {"q": location, "format": "json", "limit": "1"}
        headers = {"User-Agent": self.config.user_agent}

        try:
            response = await self.client.get(
                self.config.url, params=params, headers=headers, timeout=self.config.timeout
            )
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed for {location!r}: {e}")
            raise GeocodeUnavailableError(f"Geocoding request failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Geocoder returned HTTP {response.status_code} for {location!r}")
            return None

        try:
            data = response.json()
            if not data:
                return None
            first = data[0]
            return GeoResult(
                lat=float(first["lat"]),
                lng=float(first["lon"]),
                display_name=first.get("display_name") or location,
            )
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Geocoder returned an unexpected payload for {location!r}: {e}")
            raise GeocodeUnavailableError("Geocoder returned an invalid response") from e
