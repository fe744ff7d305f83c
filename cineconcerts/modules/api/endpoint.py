"""
RPC endpoint.

A raw ASGI app serving GET / POST / DELETE on the single MCP path. It only
calls registry operations; the registry owns every transport.
"""

import json
import logging
from typing import Any, Dict, Optional

from mcp import types
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import Message, Receive, Scope, Send

from cineconcerts.errors import CapacityError
from cineconcerts.modules.ratelimit import RateLimiter, client_key
from cineconcerts.modules.session import Session, SessionRegistry

from .models import JsonRpcErrorCode, rpc_error

logger = logging.getLogger("cineconcerts.api")

NO_VALID_SESSION = "Bad Request: No valid session"
INVALID_SESSION_TEXT = "Invalid or missing session ID"
AT_CAPACITY = "Server at capacity. Try again later."
RATE_LIMITED = "Rate limit exceeded. Try again shortly."


def is_initialize_request(payload: Any) -> bool:
    """True if *payload* is a single JSON-RPC ``initialize`` request."""
    if not isinstance(payload, dict):
        return False
    try:
        message = types.JSONRPCRequest.model_validate(payload)
    except ValidationError:
        return False
    return message.method == "initialize"


def _error_response(status_code: int, code: JsonRpcErrorCode, message: str) -> Response:
    return JSONResponse(rpc_error(code, message), status_code=status_code)


class McpEndpoint:
    """
    Routes MCP Streamable HTTP requests to per-session transports.

    POST:
    1. Known session id -> touch and route to its transport
    2. No id and an initialize payload -> create a session (or 503), and
       discard it again unless the transport answers with success
    3. Anything else -> 400 "no valid session"

    GET and DELETE require a known session id; otherwise 400.
    """

    def __init__(self, registry: SessionRegistry, limiter: Optional[RateLimiter] = None):
        self.registry = registry
        self.limiter = limiter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        extra_headers: Dict[str, str] = {}
        if self.limiter is not None:
            decision = self.limiter.check(client_key(scope))
            extra_headers = self.limiter.headers(decision)
            if not decision.allowed:
                response = _error_response(429, JsonRpcErrorCode.SERVER_ERROR, RATE_LIMITED)
                response.headers.update(extra_headers)
                await response(scope, receive, send)
                return

        state = {"started": False, "status": None}

        async def tracked_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                state["started"] = True
                state["status"] = message["status"]
                if extra_headers:
                    headers = list(message.get("headers", []))
                    headers.extend(
                        (name.lower().encode("latin-1"), value.encode("latin-1"))
                        for name, value in extra_headers.items()
                    )
                    message = {**message, "headers": headers}
            await send(message)

        request = Request(scope, receive)
        try:
            if request.method == "POST":
                await self._handle_post(request, scope, receive, tracked_send, state)
            else:
                await self._handle_session_request(request, scope, receive, tracked_send, state)
        except Exception:
            logger.exception("MCP %s error", request.method)
            if not state["started"]:
                response = _error_response(
                    500, JsonRpcErrorCode.INTERNAL_ERROR, "Internal server error"
                )
                await response(scope, receive, tracked_send)

    async def _handle_post(
        self,
        request: Request,
        scope: Scope,
        receive: Receive,
        send: Send,
        state: Dict[str, Any],
    ) -> None:
        body = await request.body()
        replay = _replay_receive(body, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        session = self.registry.resolve(session_id)
        if session is not None:
            self.registry.touch(session.session_id)
            await session.transport.handle_request(scope, replay, send)
            return

        if session_id:
            logger.info("Rejecting POST for unknown session %s", session_id)
            await _error_response(400, JsonRpcErrorCode.SERVER_ERROR, NO_VALID_SESSION)(
                scope, receive, send
            )
            return

        try:
            payload = json.loads(body)
        except ValueError:
            await _error_response(400, JsonRpcErrorCode.PARSE_ERROR, "Parse error: Invalid JSON")(
                scope, receive, send
            )
            return

        if not is_initialize_request(payload):
            await _error_response(400, JsonRpcErrorCode.SERVER_ERROR, NO_VALID_SESSION)(
                scope, receive, send
            )
            return

        try:
            session = await self.registry.create()
        except CapacityError:
            await _error_response(503, JsonRpcErrorCode.SERVER_ERROR, AT_CAPACITY)(
                scope, receive, send
            )
            return

        # The session only counts once its transport accepts the handshake.
        try:
            await session.transport.handle_request(scope, replay, send)
        finally:
            status = state["status"]
            if status is None or status >= 400:
                await self.registry.discard(session.session_id)

    async def _handle_session_request(
        self,
        request: Request,
        scope: Scope,
        receive: Receive,
        send: Send,
        state: Dict[str, Any],
    ) -> None:
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        session: Optional[Session] = self.registry.resolve(session_id)
        if session is None:
            await PlainTextResponse(INVALID_SESSION_TEXT, status_code=400)(scope, receive, send)
            return

        if request.method == "DELETE":
            await session.transport.handle_request(scope, receive, send)
            status = state["status"]
            if status is not None and status < 400:
                self.registry.remove(session.session_id)
            return

        self.registry.touch(session.session_id)
        await session.transport.handle_request(scope, receive, send)


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """A receive callable that yields the already-read body once, then defers."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay
