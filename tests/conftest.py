"""
Shared pytest fixtures for CineConcerts tests.

This module provides common fixtures including:
- FakeTransport: In-memory stand-in for the per-session MCP transport
- FakeClock: Manually advanced time source for the session registry
- Provider mocks for tool and endpoint tests
"""

import asyncio
import os
import sys
from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from starlette.responses import JSONResponse, Response

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cineconcerts.config import (
    GeocodeConfig,
    RateLimitConfig,
    SearchConfig,
    ServerConfig,
    SessionConfig,
    Settings,
)
from cineconcerts.modules.geocode import GeoResult
from cineconcerts.modules.session import SessionRegistry

SESSION_HEADER = "mcp-session-id"

INITIALIZE_REQUEST = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "0.0.1"},
    },
}

TOOLS_LIST_REQUEST = {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}}


# =============================================================================
# Time and Transport Fakes
# =============================================================================


class FakeClock:
    """Clock whose value only changes when a test says so."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """
    In-memory session transport.

    Answers every request with a small JSON-RPC result carrying its session
    id, and answers DELETE by closing itself, mirroring what the MCP
    transport does for explicit termination.
    """

    def __init__(
        self,
        session_id: str,
        fail_open: bool = False,
        fail_close: bool = False,
        fail_requests: bool = False,
        hang_open: bool = False,
        reject_status: Optional[int] = None,
    ):
        self.session_id = session_id
        self.fail_open = fail_open
        self.fail_close = fail_close
        self.fail_requests = fail_requests
        self.hang_open = hang_open
        self.reject_status = reject_status
        self.opened = False
        self.close_calls = 0
        self.requests: List[str] = []
        self.bodies: List[bytes] = []
        self._closed = False
        self._callbacks: List[Callable[[str], None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        if self.fail_open:
            raise RuntimeError("transport failed to start")
        if self.hang_open:
            await asyncio.Event().wait()
        self.opened = True

    async def handle_request(self, scope, receive, send) -> None:
        method = scope["method"]
        self.requests.append(method)
        if self.fail_requests:
            raise RuntimeError("transport exploded")

        if method == "POST":
            message = await receive()
            self.bodies.append(message.get("body", b""))

        if self.reject_status is not None:
            # Refuse the request the way the MCP transport refuses bad headers
            response = JSONResponse(
                {"jsonrpc": "2.0", "error": {"code": -32600, "message": "Rejected"}, "id": None},
                status_code=self.reject_status,
            )
        elif method == "DELETE":
            response = Response(status_code=200)
            self.simulate_close()
        else:
            response = JSONResponse(
                {"jsonrpc": "2.0", "result": {"sessionId": self.session_id}, "id": 1},
                headers={SESSION_HEADER: self.session_id},
            )
        await response(scope, receive, send)

    async def close(self) -> None:
        self.close_calls += 1
        if self.fail_close:
            raise RuntimeError("close failed")
        self.simulate_close()

    def on_close(self, callback: Callable[[str], None]) -> None:
        if self._closed:
            callback(self.session_id)
            return
        self._callbacks.append(callback)

    def simulate_close(self) -> None:
        """Close as if the underlying connection dropped."""
        if self._closed:
            return
        self._closed = True
        for callback in self._callbacks:
            callback(self.session_id)


class FakeTransportFactory:
    """Transport factory that remembers every transport it built."""

    def __init__(self, **transport_kwargs):
        self.transport_kwargs = transport_kwargs
        self.created: Dict[str, FakeTransport] = {}

    def __call__(self, session_id: str) -> FakeTransport:
        transport = FakeTransport(session_id, **self.transport_kwargs)
        self.created[session_id] = transport
        return transport


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def registry(transport_factory, clock):
    """Registry with a small cap and a 30 minute TTL."""
    return SessionRegistry(transport_factory, max_sessions=3, session_ttl=1800, clock=clock)


@pytest.fixture
def mock_search():
    """Search provider mock returning no hits by default."""
    search = AsyncMock()
    search.search = AsyncMock(return_value=[])
    search.geo_search = AsyncMock(return_value=[])
    search.browse = AsyncMock(return_value=[])
    search.find_by_show_code = AsyncMock(return_value=None)
    return search


@pytest.fixture
def mock_geocoder():
    geocoder = AsyncMock()
    geocoder.geocode = AsyncMock(
        return_value=GeoResult(lat=40.7128, lng=-74.006, display_name="New York, United States")
    )
    return geocoder


def make_settings(
    max_sessions: int = 100,
    rate_limit: int = 1000,
    json_response: bool = False,
    mcp_path: str = "/",
) -> Settings:
    """Settings suitable for in-process tests."""
    return Settings(
        server=ServerConfig(mcp_path=mcp_path, json_response=json_response),
        session=SessionConfig(max_sessions=max_sessions, session_ttl=1800, sweep_interval=300),
        rate_limit=RateLimitConfig(max_requests=rate_limit, window_seconds=60),
        search=SearchConfig(app_id="TESTAPP", api_key="test-key"),
        geocode=GeocodeConfig(),
    )


@pytest.fixture
def sample_hit():
    return {
        "objectID": "rec_123",
        "Title": "Harry Potter and the Prisoner of Azkaban in Concert",
        "Event Date": "2026-11-14",
        "Show Code": "HP3-NYC-2026",
        "Venue": "Radio City Music Hall",
        "City": "New York",
        "State": "NY",
        "Country": "United States",
        "Buy Tickets": "https://tickets.example.com/hp3-nyc",
        "_geoloc": {"lat": 40.76, "lng": -73.98},
        "_highlightResult": {"Title": {"value": "..."}},
    }


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests that drive the real MCP transport end to end"
    )
