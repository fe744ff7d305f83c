"""
Per-session MCP transport.

Wraps the SDK's StreamableHTTPServerTransport together with the background
task that runs one MCP server instance on it. The session registry only
sees open / handle_request / close and the close notification.
"""

import asyncio
import contextlib
import logging
from typing import Callable, List, Optional

from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.types import Receive, Scope, Send

logger = logging.getLogger("cineconcerts.transport")

ServerFactory = Callable[[], Server]


class McpSessionTransport:
    """Transport handle bound 1:1 to one MCP session."""

    # Seconds to wait for the server task after terminating the transport
    CLOSE_TIMEOUT = 5.0

    def __init__(
        self,
        session_id: str,
        server_factory: ServerFactory,
        json_response: bool = False,
    ):
        self.session_id = session_id
        self._server_factory = server_factory
        self._http = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=json_response,
        )
        self._task: Optional[asyncio.Task] = None
        self._callbacks: List[Callable[[str], None]] = []
        self._closed = False

    @classmethod
    def factory(
        cls, server_factory: ServerFactory, json_response: bool = False
    ) -> Callable[[str], "McpSessionTransport"]:
        """Build a transport factory suitable for SessionRegistry."""

        def build(session_id: str) -> "McpSessionTransport":
            return cls(session_id, server_factory, json_response=json_response)

        return build

    @property
    def closed(self) -> bool:
        return self._closed

    def on_close(self, callback: Callable[[str], None]) -> None:
        """Register a close callback; fires immediately if already closed."""
        if self._closed:
            callback(self.session_id)
            return
        self._callbacks.append(callback)

    async def open(self) -> None:
        """Start the server task and wait until its streams are connected."""
        if self._task is not None:
            return
        started = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(
            self._run(started), name=f"mcp-session-{self.session_id}"
        )
        await started

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._http.handle_request(scope, receive, send)

    async def close(self) -> None:
        """Terminate the transport and wait for the server task to end."""
        if not self._http.is_terminated:
            await self._http.terminate()

        task = self._task
        if task is None:
            self._mark_closed()
            return
        if not task.done():
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=self.CLOSE_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(
                    "Server task for session %s did not stop in %ss; cancelling",
                    self.session_id,
                    self.CLOSE_TIMEOUT,
                )
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    async def _run(self, started: asyncio.Future) -> None:
        server = self._server_factory()
        try:
            async with self._http.connect() as (read_stream, write_stream):
                started.set_result(None)
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=False,
                )
        except Exception as exc:
            if not started.done():
                started.set_exception(exc)
            else:
                logger.exception("MCP server for session %s crashed", self.session_id)
        finally:
            if not started.done():
                started.cancel()
            self._mark_closed()

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug("Transport for session %s closed", self.session_id)
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self.session_id)
            except Exception:
                logger.exception("Close callback failed for session %s", self.session_id)
