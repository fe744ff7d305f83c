#!/usr/bin/env python3
"""
CineConcerts MCP - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the MCP endpoint and health check under uvicorn

All business logic is in the modules, following black box principles.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import click
import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cineconcerts import __version__
from cineconcerts.config import Settings, load_settings
from cineconcerts.logging_config import HEALTH_PATH, configure_logging, get_logging_config

# Import modules through their black box interfaces
from cineconcerts.modules.api import HealthResponse, McpEndpoint
from cineconcerts.modules.geocode import NominatimGeocoder
from cineconcerts.modules.ratelimit import RateLimiter
from cineconcerts.modules.search import AlgoliaSearch
from cineconcerts.modules.session import SessionRegistry, SessionSweeper, TransportFactory
from cineconcerts.modules.tools import TOOL_NAMES, create_server
from cineconcerts.modules.transport import McpSessionTransport

logger = logging.getLogger("cineconcerts.main")

SERVER_NAME = "cineconcerts-mcp"


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport_factory: Optional[TransportFactory] = None,
    search=None,
    geocoder=None,
    clock=time.monotonic,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted
        transport_factory: Session transport factory; defaults to MCP transports
        search: Search provider; defaults to Algolia built at startup
        geocoder: Geocoding provider; defaults to Nominatim built at startup
        clock: Time source for session activity tracking
    """
    settings = settings or load_settings()

    def server_factory():
        return create_server(app.state.search, app.state.geocoder)

    registry = SessionRegistry(
        transport_factory
        or McpSessionTransport.factory(
            server_factory, json_response=settings.server.json_response
        ),
        max_sessions=settings.session.max_sessions,
        session_ttl=settings.session.session_ttl,
        clock=clock,
    )
    limiter = RateLimiter(
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
    )
    sweeper = SessionSweeper(
        registry, interval=settings.session.sweep_interval, on_tick=limiter.prune
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting CineConcerts MCP server...")

        http_client: Optional[httpx.AsyncClient] = None
        if search is None or geocoder is None:
            http_client = httpx.AsyncClient()

        if search is None and not settings.search.is_configured:
            await http_client.aclose()
            raise ValueError(
                "ALGOLIA_APP_ID and ALGOLIA_API_KEY environment variables are required"
            )

        app.state.search = search or AlgoliaSearch(http_client, settings.search)
        app.state.geocoder = geocoder or NominatimGeocoder(http_client, settings.geocode)
        sweeper.start()

        server = settings.server
        logger.info(f"CineConcerts MCP server listening on {server.host}:{server.port}")
        logger.info(f"Health: http://{server.host}:{server.port}{HEALTH_PATH}")
        logger.info(f"MCP endpoint: http://{server.host}:{server.port}{server.mcp_path}")
        logger.info(
            f"Rate limit: {limiter.max_requests} req/{limiter.window_seconds:g}s per IP | "
            f"Max sessions: {registry.max_sessions} | "
            f"Session TTL: {registry.session_ttl / 60:g}min"
        )

        yield

        # Shutdown
        logger.info("Shutting down...")
        await sweeper.stop()
        await registry.close_all()
        if http_client is not None:
            await http_client.aclose()
        logger.info("CineConcerts MCP server shutdown complete")

    app = FastAPI(
        title="CineConcerts MCP",
        description="CineConcerts film-concert listings as MCP tools",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.limiter = limiter
    app.state.sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )

    @app.get(HEALTH_PATH)
    async def health_check():
        """
        Unauthenticated, unrated health check.

        Returns:
            200: Server name, version, live session count and tool names
        """
        return HealthResponse(
            server=SERVER_NAME,
            version=__version__,
            active_sessions=registry.count,
            tools=TOOL_NAMES,
        ).model_dump(by_alias=True)

    # Rate limiting applies to the MCP endpoint only, inside McpEndpoint
    app.add_route(
        settings.server.mcp_path,
        McpEndpoint(registry, limiter),
        methods=["GET", "POST", "DELETE"],
        include_in_schema=False,
    )

    return app


@click.command()
@click.option("--host", "host", default=None, help="Bind host (overrides HOST)")
@click.option("--port", "port", default=None, type=int, help="Listen port (overrides PORT)")
def main(host: Optional[str], port: Optional[int]) -> None:
    """Run the server with uvicorn."""
    settings = load_settings()
    if host:
        settings.server.host = host
    if port:
        settings.server.port = port

    configure_logging(settings.server.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level.lower(),
        log_config=get_logging_config(settings.server.log_level),
    )


if __name__ == "__main__":
    main()
