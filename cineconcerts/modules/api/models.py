"""
CineConcerts HTTP data models.

These models define the bodies the HTTP entry point produces itself, as
opposed to the JSON-RPC traffic the MCP transport handles.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

# Enums


class JsonRpcErrorCode(IntEnum):
    """JSON-RPC error codes used by the entry point."""

    PARSE_ERROR = -32700
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000


# Response Models (API Output)


class JsonRpcErrorBody(BaseModel):
    code: int
    message: str


class JsonRpcErrorResponse(BaseModel):
    """JSON-RPC error envelope for failures outside any session."""

    jsonrpc: str = "2.0"
    error: JsonRpcErrorBody
    id: Optional[Union[str, int]] = None


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str = "ok"
    server: str
    version: str
    active_sessions: int = Field(..., serialization_alias="activeSessions", ge=0)
    tools: List[str]


def rpc_error(code: JsonRpcErrorCode, message: str) -> Dict[str, Any]:
    """Serialized JSON-RPC error envelope with a null id."""
    envelope = JsonRpcErrorResponse(error=JsonRpcErrorBody(code=int(code), message=message))
    return envelope.model_dump()
