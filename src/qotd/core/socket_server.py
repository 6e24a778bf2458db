"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. It knows nothing about
quotes: every accepted client is wrapped in a Connection and handed to a
callback, and every failed accept is handed to another.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT           ── failure is fatal (BindError)
    3. listen()    Start queueing clients
    4. accept()    Wait for the next client  ── failure is reported, loop goes on
    5. close()     Release the socket on shutdown

=============================================================================
ONE CLIENT AT A TIME
=============================================================================

The loop does not accept the next client until the callback for the
current one returns:

    accept() ──► on_connection(conn) ──► accept() ──► on_connection(conn) ...

A QOTD response is a single short write, so a sequential loop keeps up
with normal traffic. The cost: a client that never drains its receive
buffer blocks everyone behind it. ServerConfig.write_timeout bounds that.

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() runs with a short timeout so shutdown() (from a signal handler or
another thread) is noticed within ServerConfig.accept_timeout seconds:

    while running:
        try:
            accept()          # Blocks for at most accept_timeout
        except timeout:
            continue          # Not a client, not an error: just poll again

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..errors import BindError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Sequential TCP accept loop.

    Usage:
        def on_connection(conn: Connection):
            with conn:
                conn.write(b"hi\\r\\n")
                conn.flush()

        def on_accept_error(exc: OSError):
            print(f"accept failed: {exc}")

        server = SocketServer(config)
        server.start(on_connection, on_accept_error)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        # Created in start()
        self._socket: Optional[socket.socket] = None

        self._running = False
        self._listening_event = threading.Event()

        # Restored on cleanup, in case we're embedded in a larger app
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (IP, port).

        Once listening this is the real address, so port 0 in the config
        resolves to the port the OS picked.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.config.accept_timeout)
        return sock

    def _setup_signals(self):
        """
        Turn SIGTERM/SIGINT into a graceful shutdown.

        Python only allows installing handlers from the main thread, so an
        embedded server running in a worker thread skips this.
        """
        if not self.config.install_signal_handlers:
            return
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(
        self,
        on_connection: Callable[[Connection], None],
        on_accept_error: Callable[[OSError], None],
    ):
        """
        Bind, listen, and serve until shutdown() is called.

        Args:
            on_connection: Called with each accepted client. Runs to
                           completion before the next accept().
            on_accept_error: Called with each OSError raised by accept().

        Raises:
            BindError: The address could not be bound (in use, no privilege).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise BindError(self.config.host, self.config.port, e) from e

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._listening_event.set()

        try:
            self._accept_loop(on_connection, on_accept_error)
        finally:
            self._cleanup()

    def _accept_loop(
        self,
        on_connection: Callable[[Connection], None],
        on_accept_error: Callable[[OSError], None],
    ):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown()
                logger.debug(f"Accept error: {e}")
                on_accept_error(e)
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            if self.config.write_timeout is not None:
                client_socket.settimeout(self.config.write_timeout)
            else:
                client_socket.setblocking(True)

            on_connection(Connection(socket=client_socket, address=client_address))

    def shutdown(self):
        """Stop the accept loop. Safe to call more than once, from any thread."""
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._running = False
        self._listening_event.clear()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._listening_event.wait(timeout)

