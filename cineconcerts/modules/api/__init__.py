"""
API Module - Black Box Interface

Purpose: HTTP routing for the MCP endpoint
Interface: McpEndpoint (ASGI app), response models
Hidden: Request replay, rate limit headers, error envelopes

The API module only orchestrates - it contains no business logic.
All session state lives in the session module.
"""

from .endpoint import (
    AT_CAPACITY,
    INVALID_SESSION_TEXT,
    NO_VALID_SESSION,
    RATE_LIMITED,
    McpEndpoint,
    is_initialize_request,
)
from .models import HealthResponse, JsonRpcErrorCode, JsonRpcErrorResponse, rpc_error

__all__ = [
    "AT_CAPACITY",
    "HealthResponse",
    "INVALID_SESSION_TEXT",
    "JsonRpcErrorCode",
    "JsonRpcErrorResponse",
    "McpEndpoint",
    "NO_VALID_SESSION",
    "RATE_LIMITED",
    "is_initialize_request",
    "rpc_error",
]
