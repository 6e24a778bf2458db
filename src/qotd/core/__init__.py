"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing, independent of where quotes come from:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds the listening socket (port 17 by default)                  │
    │  • Accepts clients one at a time                                    │
    │  • Reports failed accepts without stopping                          │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One client at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps a client socket with write / flush / close                 │
    │  • Never reads: QOTD clients send nothing                           │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Listening socket + sequential accept loop
    "Connection",       # Wrapper for a client socket
    "ConnectionState",  # Enum for connection lifecycle states
]
