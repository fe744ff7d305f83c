"""Session interfaces following Black Box Design principles."""
from typing import Callable, Protocol

from starlette.types import Receive, Scope, Send


class SessionTransport(Protocol):
    """Protocol for the per-session RPC transport handle.

    The registry treats a transport as opaque: it opens it, routes raw
    ASGI requests to it, closes it, and listens for its close notification.
    """

    session_id: str

    @property
    def closed(self) -> bool:
        """True once the transport has shut down."""
        ...

    async def open(self) -> None:
        """Start the transport. Raises if it cannot be brought up."""
        ...

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle one HTTP request addressed to this session."""
        ...

    async def close(self) -> None:
        """Shut the transport down. Safe to call more than once."""
        ...

    def on_close(self, callback: Callable[[str], None]) -> None:
        """Register a callback fired once with the session id on shutdown."""
        ...


TransportFactory = Callable[[str], SessionTransport]
Clock = Callable[[], float]
