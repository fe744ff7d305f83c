"""
Session Module - Black Box Interface

Purpose: Own the lifecycle of live MCP sessions
Interface: SessionRegistry.resolve(), touch(), create(), remove(), sweep()
Hidden: Id allocation, capacity accounting, idle expiry

Transports are injected through a factory, so the registry never depends
on the MCP SDK directly.
"""

from .interfaces import SessionTransport, TransportFactory
from .registry import Session, SessionRegistry
from .sweeper import SessionSweeper

__all__ = [
    "Session",
    "SessionRegistry",
    "SessionSweeper",
    "SessionTransport",
    "TransportFactory",
]
