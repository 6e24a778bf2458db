"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the QOTD server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m qotd --port 1717 file quotes.txt                │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── QOTD_PORT=1717 python -m qotd file quotes.txt             │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The quote source itself is NOT part of this config: it is chosen by the
provider selector on the command line (see quotes.load_source).

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the QOTD server.

    Development:
        ServerConfig(port=1717, log_level="DEBUG")   # No root needed

    Production:
        ServerConfig(host="0.0.0.0")                 # Port 17, all interfaces
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to."""

    port: int = 17
    """
    The port to listen on.
    - 17 - Standard QOTD port (RFC 865, requires root on Unix)
    - 0  - Let the OS pick a free port (tests)
    """

    backlog: int = 128
    """Maximum number of queued connections."""

    accept_timeout: float = 1.0
    """
    How long accept() blocks before re-checking for shutdown.
    A timeout here is not a failed accept; nothing is counted.
    """

    write_timeout: Optional[float] = None
    """
    Timeout for writing to a client.
    None = blocking. A client that stops reading then stalls the server,
    since connections are served one at a time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    # ─────────────────────────────────────────────────────────────────────
    # PROCESS
    # ─────────────────────────────────────────────────────────────────────

    install_signal_handlers: bool = True
    """Catch SIGINT/SIGTERM for a graceful shutdown (main thread only)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        QOTD_HOST           Server host (default: 127.0.0.1)
        QOTD_PORT           Server port (default: 17)
        QOTD_BACKLOG        Listen backlog (default: 128)
        QOTD_WRITE_TIMEOUT  Write timeout in seconds (default: none)
        QOTD_LOG_LEVEL      Logging level (default: WARNING)
        """
        write_timeout = os.getenv("QOTD_WRITE_TIMEOUT")
        return cls(
            host=os.getenv("QOTD_HOST", "127.0.0.1"),
            port=int(os.getenv("QOTD_PORT", "17")),
            backlog=int(os.getenv("QOTD_BACKLOG", "128")),
            write_timeout=float(write_timeout) if write_timeout else None,
            log_level=os.getenv("QOTD_LOG_LEVEL", "WARNING"),
        )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.WARNING)

    def validate(self) -> None:
        """Validate configuration values. Fail fast, before binding."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.write_timeout is not None and self.write_timeout <= 0:
            raise ValueError("write_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")
