import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from cineconcerts.errors import CapacityError

from .interfaces import Clock, SessionTransport, TransportFactory

logger = logging.getLogger("cineconcerts.session")


@dataclass
class Session:
    """One live MCP session and the transport it owns."""

    session_id: str
    transport: SessionTransport
    last_activity: float
    created_at: float


class SessionRegistry:
    """
    Single source of truth mapping session ids to live sessions.

    All mutations run to completion inside one event-loop turn, so the map
    needs no locking. The only await on a mutating path is opening a new
    transport in create(); a pending-slot counter keeps the capacity bound
    while that await is in flight.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        max_sessions: int = 100,
        session_ttl: float = 30 * 60,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize session registry.

        Args:
            transport_factory: Builds a transport bound to a session id
            max_sessions: Hard cap on concurrently live sessions
            session_ttl: Idle seconds after which a sweep evicts a session
            clock: Returns the current time in seconds
        """
        self.transport_factory = transport_factory
        self.max_sessions = max_sessions
        self.session_ttl = session_ttl
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._pending = 0

    @property
    def count(self) -> int:
        """Number of live sessions."""
        return len(self._sessions)

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def resolve(self, session_id: Optional[str]) -> Optional[Session]:
        """Look up a live session. No side effects."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def touch(self, session_id: str) -> None:
        """Mark a session as active now. Unknown ids are ignored."""
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_activity = self.clock()

    async def create(self) -> Session:
        """
        Create a session with a freshly opened transport.

        Returns:
            The registered session

        Raises:
            CapacityError: live plus in-flight sessions already at the cap

        Logic:
        1. Reserve a slot (or refuse)
        2. Allocate a unique id and build its transport
        3. Open the transport; a failure (or cancellation) closes it,
           releases the slot and propagates
        4. Subscribe remove() to the transport's close notification
        5. Register with last_activity = now
        """
        if len(self._sessions) + self._pending >= self.max_sessions:
            logger.warning(
                "Rejecting new session: at capacity (%d/%d)",
                len(self._sessions),
                self.max_sessions,
            )
            raise CapacityError(self.max_sessions)

        self._pending += 1
        try:
            session_id = self._new_session_id()
            transport = self.transport_factory(session_id)
            try:
                await transport.open()
            except BaseException:
                # Never registered, so nothing else will ever close it.
                await asyncio.shield(self._close_transport(transport))
                raise
        finally:
            self._pending -= 1

        transport.on_close(self.remove)
        if transport.closed:
            # Server task already ended; nothing to register.
            raise RuntimeError(f"Transport for session {session_id} closed during startup")

        now = self.clock()
        session = Session(
            session_id=session_id,
            transport=transport,
            last_activity=now,
            created_at=now,
        )
        self._sessions[session_id] = session
        logger.info("Session %s created (%d live)", session_id, len(self._sessions))
        return session

    def remove(self, session_id: str) -> Optional[Session]:
        """
        Delete a session entry. Idempotent.

        Whichever of explicit termination, transport close or idle sweep
        fires first does the removal; later calls find nothing and no-op.
        """
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Session %s removed (%d live)", session_id, len(self._sessions))
        return session

    async def discard(self, session_id: str) -> Optional[Session]:
        """
        Close a session's transport and drop the entry.

        Used when a freshly created session never completed its handshake.
        Unknown ids are ignored.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        logger.info("Discarding session %s (handshake not accepted)", session_id)
        await self._close_transport(session.transport)
        return self.remove(session_id) or session

    async def sweep(self, now: Optional[float] = None) -> List[str]:
        """
        Evict every session idle for longer than the TTL.

        Args:
            now: Sweep timestamp; defaults to the registry clock

        Returns:
            Ids of evicted sessions
        """
        if now is None:
            now = self.clock()

        expired = [
            sid
            for sid, session in self._sessions.items()
            if now - session.last_activity > self.session_ttl
        ]

        for sid in expired:
            session = self._sessions.get(sid)
            if session is None:
                continue
            logger.info("Purging idle session %s", sid)
            await self._close_transport(session.transport)
            self.remove(sid)

        return expired

    async def close_all(self) -> None:
        """Close every live transport and empty the registry."""
        sessions = list(self._sessions.values())
        for session in sessions:
            await self._close_transport(session.transport)
            self.remove(session.session_id)
        if sessions:
            logger.info("Closed %d session(s) on shutdown", len(sessions))

    async def _close_transport(self, transport: SessionTransport) -> None:
        try:
            await transport.close()
        except Exception:
            logger.warning(
                "Failed to close transport for session %s", transport.session_id, exc_info=True
            )

    def _new_session_id(self) -> str:
        while True:
            session_id = str(uuid.uuid4())
            if session_id not in self._sessions:
                return session_id
