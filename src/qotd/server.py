"""
=============================================================================
QOTD SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         QOTDServer                                   │
    │   owns: quote source · random generator · served counter · reporter │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ── accept ──► _on_connection(conn)                   │
    │        │                          │                                  │
    │        │                          ├──► handle(conn, source, rng)    │
    │        │                          ├──► error? → report_error        │
    │        │                          └──► served += 1 → report_count   │
    │        │                                                             │
    │        └── accept fails ──► _on_accept_error(exc)                   │
    │                                   ├──► report_error                  │
    │                                   └──► served += 1 → report_count   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT THE COUNTER COUNTS
=============================================================================

The served counter goes up once per accept attempt that returned, whether
it produced a client or an error, and whether or not the client got its
quote. Poll timeouts on accept() are not attempts and are not counted.

No failure on a single connection stops the server. The loop ends only
when shutdown() is called or SIGINT/SIGTERM arrives.

=============================================================================
"""

import logging
import random
from datetime import datetime
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import handle
from .quotes import QuoteSource
from .status import StatusReporter


logger = logging.getLogger(__name__)


class QOTDServer:
    """
    Quote of the Day server.

    Example:
        source = StaticList.from_file("quotes.txt")
        server = QOTDServer(source, ServerConfig(port=1717))
        server.run()  # Blocks until Ctrl+C
    """

    def __init__(
        self,
        source: QuoteSource,
        config: Optional[ServerConfig] = None,
        reporter: Optional[StatusReporter] = None,
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.config = config or ServerConfig()
        self.reporter = reporter or StatusReporter()
        self._rng = rng or random.Random()
        self._served = 0
        self._socket_server = SocketServer(self.config)

    @property
    def served(self) -> int:
        """Connections processed since start."""
        return self._served

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def run(self):
        """
        Start serving (blocking).

        Raises:
            BindError: If the listening socket can't be bound.
        """
        self._setup_logging()

        self.reporter.report_loaded(self.source.known_size())
        self.reporter.report_count(self._served)

        try:
            self._socket_server.start(self._on_connection, self._on_accept_error)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info(f"Server stopped after {self._served} connections")

    def shutdown(self):
        self._socket_server.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        level = self.config.log_level_number

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("qotd").setLevel(level)

    def _on_connection(self, conn: Connection):
        try:
            handle(conn, self.source, self._rng)
        except Exception as e:
            logger.debug(f"[{conn.id}] Connection error: {e}", exc_info=True)
            self._report_error(e)
        finally:
            self._count()

    def _on_accept_error(self, exc: OSError):
        self._report_error(exc)
        self._count()

    def _count(self):
        self._served += 1
        self.reporter.report_count(self._served)

    def _report_error(self, exc: BaseException):
        self.reporter.report_error(datetime.now(), str(exc) or type(exc).__name__)
