"""Match service module.

Provides:
- Line-oriented connections with receive deadlines (connection.py)
- The two-player turn dispatcher (dispatcher.py)
"""

from .connection import Connection, ConnectionFailure, PeerClosed, ReceiveTimeout
from .dispatcher import (
    HandshakeFailed,
    MatchPhase,
    MatchServer,
    MatchSummary,
    ProtocolViolation,
)

__all__ = [
    # Connection
    "Connection",
    "ConnectionFailure",
    "PeerClosed",
    "ReceiveTimeout",
    # Dispatcher
    "HandshakeFailed",
    "MatchPhase",
    "MatchServer",
    "MatchSummary",
    "ProtocolViolation",
]
