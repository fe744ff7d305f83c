"""
Rate Limit Module - Black Box Interface

Purpose: Bound request volume per client on the RPC endpoint
Interface: RateLimiter.check(), prune(), client_key()
Hidden: Window bookkeeping
"""

from .limiter import UNKNOWN_CLIENT, RateLimitDecision, RateLimiter, client_key

__all__ = ["RateLimitDecision", "RateLimiter", "UNKNOWN_CLIENT", "client_key"]
