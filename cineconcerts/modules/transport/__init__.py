"""
Transport Module - Black Box Interface

Purpose: Bind one MCP server instance to one Streamable HTTP session
Interface: McpSessionTransport.open(), handle_request(), close(), on_close()
Hidden: SDK stream plumbing, server task management
"""

from .mcp_transport import McpSessionTransport, ServerFactory

__all__ = ["McpSessionTransport", "ServerFactory"]
