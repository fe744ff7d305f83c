"""
Tool handlers.

Each handler takes one validated input model, calls the providers and
returns the text shown to the agent. Provider outages become ordinary text
results: the RPC call itself succeeded, only the lookup did not.
"""

from cineconcerts.errors import GeocodeUnavailableError, SearchUnavailableError
from cineconcerts.modules.search import format_details, format_events

from .models import (
    MAX_LIST_LIMIT,
    FindNearbyShowsInput,
    GetShowDetailsInput,
    ListUpcomingShowsInput,
    SearchShowsInput,
)

SEARCH_UNAVAILABLE = "Could not search CineConcerts shows right now. Please try again shortly."


class ShowTools:
    """The four CineConcerts query tools bound to shared providers."""

    def __init__(self, search, geocoder):
        """
        Args:
            search: Provider with search / geo_search / browse / find_by_show_code
            geocoder: Provider with geocode(location)
        """
        self.search = search
        self.geocoder = geocoder

    async def search_shows(self, params: SearchShowsInput) -> str:
        try:
            hits = await self.search.search(params.query)
        except SearchUnavailableError:
            return SEARCH_UNAVAILABLE

        if not hits:
            return f'No CineConcerts shows found matching "{params.query}".'
        return f'Found {len(hits)} show(s) matching "{params.query}":\n\n{format_events(hits)}'

    async def find_nearby_shows(self, params: FindNearbyShowsInput) -> str:
        try:
            geo = await self.geocoder.geocode(params.location)
        except GeocodeUnavailableError:
            geo = None

        if geo is None:
            return (
                f'Could not geocode "{params.location}". '
                "Try a more specific city name or address."
            )

        radius = f"{params.radius_km:g}"
        try:
            hits = await self.search.geo_search(geo.lat, geo.lng, params.radius_km * 1000)
        except SearchUnavailableError:
            return SEARCH_UNAVAILABLE

        if not hits:
            return f"No CineConcerts shows found within {radius}km of {geo.display_name}."
        return (
            f"Found {len(hits)} show(s) within {radius}km of {geo.display_name}:"
            f"\n\n{format_events(hits)}"
        )

    async def list_upcoming_shows(self, params: ListUpcomingShowsInput) -> str:
        limit = min(params.limit, MAX_LIST_LIMIT)
        try:
            hits = await self.search.browse(limit)
        except SearchUnavailableError:
            return SEARCH_UNAVAILABLE

        if not hits:
            return "No upcoming CineConcerts shows found."
        return f"Showing {len(hits)} upcoming CineConcerts event(s):\n\n{format_events(hits)}"

    async def get_show_details(self, params: GetShowDetailsInput) -> str:
        try:
            hit = await self.search.find_by_show_code(params.show_code)
        except SearchUnavailableError:
            return SEARCH_UNAVAILABLE

        if hit is None:
            return f'No CineConcerts show found with code "{params.show_code}".'
        title = hit.get("Title") or params.show_code
        return f'Show details for "{title}":\n\n{format_details(hit)}'
