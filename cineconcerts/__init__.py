"""
CineConcerts MCP - Event listings for AI agents

Exposes the CineConcerts film-concert catalog as MCP tools over the
Streamable HTTP transport.

Architecture:
- Each module is self-contained with clear interfaces
- The session registry is the only owner of live transports
- Providers are stateless and shared across sessions

Modules:
- session: Session registry, capacity limits and idle sweeping
- transport: Per-session MCP transport handle
- ratelimit: Per-client request limiting
- search: Algolia-backed event search
- geocode: Nominatim-backed location lookup
- tools: MCP tool definitions and handlers
- api: HTTP entry point for the RPC endpoint
"""

__version__ = "1.0.0"
