"""
MCP server factory.

Every session gets its own low-level MCP Server with the four tools
registered; the providers behind them are shared.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Type

from mcp import types
from mcp.server.lowlevel import Server
from pydantic import BaseModel

from cineconcerts import __version__

from .handlers import ShowTools
from .models import (
    FindNearbyShowsInput,
    GetShowDetailsInput,
    ListUpcomingShowsInput,
    SearchShowsInput,
)

SERVER_NAME = "cineconcerts"


@dataclass(frozen=True)
class ToolSpec:
    """Declarative description of one tool."""

    name: str
    title: str
    description: str
    input_model: Type[BaseModel]
    handler: str

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
            annotations=types.ToolAnnotations(
                title=self.title,
                readOnlyHint=True,
                destructiveHint=False,
                openWorldHint=True,
            ),
        )


TOOL_SPECS: Dict[str, ToolSpec] = {
    definition.name: definition
    for definition in (
        ToolSpec(
            name="search_shows",
            title="Search Shows",
            description=(
                "Search for upcoming CineConcerts film-concert events by keyword "
                "(film title, city, venue, etc.)"
            ),
            input_model=SearchShowsInput,
            handler="search_shows",
        ),
        ToolSpec(
            name="find_nearby_shows",
            title="Find Nearby Shows",
            description=(
                "Find CineConcerts shows near a location (city name, address, or landmark)"
            ),
            input_model=FindNearbyShowsInput,
            handler="find_nearby_shows",
        ),
        ToolSpec(
            name="list_upcoming_shows",
            title="List Upcoming Shows",
            description="Browse all upcoming CineConcerts film-concert events",
            input_model=ListUpcomingShowsInput,
            handler="list_upcoming_shows",
        ),
        ToolSpec(
            name="get_show_details",
            title="Get Show Details",
            description="Get full details for a specific CineConcerts show by its show code",
            input_model=GetShowDetailsInput,
            handler="get_show_details",
        ),
    )
}

TOOL_NAMES: List[str] = list(TOOL_SPECS)


async def call_tool(tools: ShowTools, name: str, arguments: Dict[str, Any]) -> str:
    """Validate *arguments* for tool *name* and run its handler."""
    definition = TOOL_SPECS.get(name)
    if definition is None:
        raise ValueError(f"Unknown tool: {name}")
    params = definition.input_model.model_validate(arguments or {})
    return await getattr(tools, definition.handler)(params)


def create_server(search, geocoder) -> Server:
    """Build a fresh MCP server exposing the CineConcerts tools."""
    server = Server(SERVER_NAME, version=__version__)
    tools = ShowTools(search, geocoder)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return [definition.to_tool() for definition in TOOL_SPECS.values()]

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        text = await call_tool(tools, name, arguments)
        return [types.TextContent(type="text", text=text)]

    return server
