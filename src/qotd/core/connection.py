"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the small write-only API the QOTD
protocol needs.

=============================================================================
QOTD IS WRITE-ONLY
=============================================================================

RFC 865 has no request. The client connects and the server talks:

    Client                              Server
      │                                    │
      │ ── SYN / SYN-ACK / ACK ──────────► │   accept()
      │                                    │
      │ ◄──────── "quote text\\r\\n" ───── │   write() + flush()
      │                                    │
      │ ◄──────────────────── FIN ──────── │   close()
      │                                    │

We never call recv(). Anything the client sends is ignored.

=============================================================================
WHY A BUFFERED WRITER?
=============================================================================

socket.makefile("wb") gives us a BufferedWriter on top of the socket. The
payload and the terminator are written separately but leave in as few
segments as possible, and flush() is the single point where an I/O error
surfaces.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► WRITING ──────► CLOSED
     │                             ▲
     └─────────────────────────────┘  (closed before anything was written)

=============================================================================
"""

import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Tuple


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle of a client connection."""
    NEW = "new"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One accepted client.

    Attributes:
        socket: The client socket returned by accept().
        address: (ip, port) of the client.
        id: Short identifier for log lines.
        state: Current lifecycle state.
        bytes_sent: Bytes handed to the writer so far.

    Usage:
        with Connection(sock, addr) as conn:
            conn.write(b"hello")
            conn.flush()
        # Socket is closed here
    """

    socket: socket.socket
    address: Tuple[str, int]
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    bytes_sent: int = 0
    created_at: float = field(default_factory=time.time)
    _writer: Optional[BinaryIO] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self._writer = self.socket.makefile("wb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def write(self, data: bytes) -> None:
        """
        Queue bytes for the client.

        Raises:
            OSError: If the connection is closed or the socket fails.
        """
        if self.state == ConnectionState.CLOSED:
            raise OSError(f"[{self.id}] write on closed connection")
        self.state = ConnectionState.WRITING
        self._writer.write(data)
        self.bytes_sent += len(data)

    def flush(self) -> None:
        """
        Push everything written so far onto the wire.

        Raises:
            OSError: If the client went away (broken pipe, reset, ...).
        """
        if self.state == ConnectionState.CLOSED:
            raise OSError(f"[{self.id}] flush on closed connection")
        self._writer.flush()

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-stream right
        after the quote. Errors are ignored: the client may already be gone,
        and any failure that matters was raised by flush().
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self._writer.close()
        except OSError:
            pass  # Unflushed data to a dead peer

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.bytes_sent} bytes")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
