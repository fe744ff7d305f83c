"""
Algolia-backed event search.

Talks to the Algolia REST query endpoint of the events index. Hits are
returned as plain dicts because the index uses display names with spaces
("Event Date", "Show Code") as field names.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from cineconcerts.config import SearchConfig
from cineconcerts.errors import SearchUnavailableError

logger = logging.getLogger("cineconcerts.search")

EventHit = Dict[str, Any]

DEFAULT_HITS_PER_PAGE = 20


class AlgoliaSearch:
    """Search, geo-search, browse and show-code lookup over one index."""

    def __init__(self, client: httpx.AsyncClient, config: SearchConfig):
        """
        Initialize search provider.

        Args:
            client: Shared async HTTP client
            config: Algolia credentials and index name
        """
        self.client = client
        self.config = config

    @property
    def query_url(self) -> str:
        return (
            f"https://{self.config.app_id}-dsn.algolia.net"
            f"/1/indexes/{self.config.index_name}/query"
        )

    async def search(self, query: str, hits_per_page: int = DEFAULT_HITS_PER_PAGE) -> List[EventHit]:
        """Keyword search across titles, cities, venues and other text."""
        return await self._query({"query": query, "hitsPerPage": hits_per_page})

    async def geo_search(
        self,
        lat: float,
        lng: float,
        radius_meters: float,
        hits_per_page: int = DEFAULT_HITS_PER_PAGE,
    ) -> List[EventHit]:
        """Events within *radius_meters* of a coordinate, nearest first."""
        return await self._query(
            {
                "query": "",
                "aroundLatLng": f"{lat},{lng}",
                "aroundRadius": int(radius_meters),
                "hitsPerPage": hits_per_page,
            }
        )

    async def browse(self, limit: int) -> List[EventHit]:
        """Upcoming events in index ranking order."""
        return await self._query({"query": "", "hitsPerPage": limit})

    async def find_by_show_code(self, show_code: str) -> Optional[EventHit]:
        """
        Look up one event by show code.

        Prefers an exact (case-insensitive) Show Code or objectID match among
        the top hits, then falls back to the best-ranked hit.
        """
        hits = await self._query({"query": show_code, "hitsPerPage": 5})
        wanted = show_code.lower()
        for hit in hits:
            code = hit.get("Show Code")
            if (isinstance(code, str) and code.lower() == wanted) or hit.get("objectID") == show_code:
                return hit
        return hits[0] if hits else None

    async def _query(self, params: Dict[str, Any]) -> List[EventHit]:
        headers = {
            "X-Algolia-Application-Id": self.config.app_id or "",
            "X-Algolia-API-Key": self.config.api_key or "",
        }
        body = {"params": str(httpx.QueryParams(params))}

        try:
            response = await self.client.post(
                self.query_url, json=body, headers=headers, timeout=self.config.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Algolia query failed: {e}")
            raise SearchUnavailableError(f"Search request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Algolia returned invalid JSON: {e}")
            raise SearchUnavailableError("Search returned an invalid response") from e

        hits = payload.get("hits") if isinstance(payload, dict) else None
        if not isinstance(hits, list):
            raise SearchUnavailableError("Search response has no hits list")
        return [hit for hit in hits if isinstance(hit, dict)]
