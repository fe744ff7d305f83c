"""
Tool input models.

These models define the input each MCP tool accepts. Their JSON schema is
advertised to clients as the tool's inputSchema and they validate incoming
arguments before a handler runs.
"""

from pydantic import BaseModel, Field

MAX_LIST_LIMIT = 60


class SearchShowsInput(BaseModel):
    """Arguments for search_shows."""

    query: str = Field(
        ..., description="Search keyword: film title, city, venue name, or any text"
    )


class FindNearbyShowsInput(BaseModel):
    """Arguments for find_nearby_shows."""

    location: str = Field(..., description="City name, address, or landmark to search near")
    radius_km: float = Field(
        default=500, gt=0, description="Search radius in kilometers (default 500)"
    )


class ListUpcomingShowsInput(BaseModel):
    """Arguments for list_upcoming_shows."""

    limit: int = Field(
        default=20,
        ge=1,
        description=f"Number of shows to return (default 20, max {MAX_LIST_LIMIT})",
    )


class GetShowDetailsInput(BaseModel):
    """Arguments for get_show_details."""

    show_code: str = Field(..., description="The show code identifier (e.g. HP4-NYC-2026)")
