"""
Tools Module - Black Box Interface

Purpose: Define the MCP tools agents can call
Interface: create_server(), TOOL_NAMES, ShowTools
Hidden: Input schemas, result text, provider error handling
"""

from .handlers import ShowTools
from .server import TOOL_NAMES, TOOL_SPECS, ToolSpec, call_tool, create_server

__all__ = ["ShowTools", "TOOL_NAMES", "TOOL_SPECS", "ToolSpec", "call_tool", "create_server"]
