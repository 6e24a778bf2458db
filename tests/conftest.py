"""
pytest configuration and fixtures.
"""

import io
import socket
import threading
import time
from typing import Callable, Generator, List
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from qotd import QOTDServer, ServerConfig, StatusReporter, StaticList
from qotd.errors import QuoteError


@pytest.fixture
def quote_file(tmp_path: Path) -> Path:
    """A quote file with blank lines and stray whitespace."""
    path = tmp_path / "quotes.txt"
    path.write_text(
        "The early bird gets the worm.\n"
        "\n"
        "   Fortune favors the bold.   \n"
        "An apple a day keeps the doctor away.\n"
        "\n"
    )
    return path


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration: ephemeral port, fast shutdown polling."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        accept_timeout=0.05,
        write_timeout=5.0,
        log_level="WARNING",
        install_signal_handlers=False,
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def status_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(status_stream: io.StringIO) -> StatusReporter:
    return StatusReporter(status_stream, redraw=False)


class FailingSource:
    """Quote source that always fails."""

    def __init__(self, message: str = "quote machine broke"):
        self.message = message
        self.calls = 0

    def produce_quote(self, rng):
        self.calls += 1
        raise QuoteError(self.message)

    def known_size(self):
        return None


class FakeConnection:
    """
    Stands in for core.Connection and records what the handler does.

    fail_on: "write" or "flush" to raise BrokenPipeError at that step.
    """

    def __init__(self, fail_on: str = None):
        self.id = "fake0001"
        self.address = ("127.0.0.1", 40000)
        self.client_ip = "127.0.0.1"
        self.client_port = 40000
        self.age = 0.001
        self.events: List[str] = []
        self.written = b""
        self.flushed = b""
        self.closed = False
        self.fail_on = fail_on

    def write(self, data: bytes) -> None:
        self.events.append("write")
        if self.fail_on == "write":
            raise BrokenPipeError(32, "Broken pipe")
        self.written += data

    def flush(self) -> None:
        self.events.append("flush")
        if self.fail_on == "flush":
            raise BrokenPipeError(32, "Broken pipe")
        self.flushed = self.written

    def close(self) -> None:
        self.events.append("close")
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


@pytest.fixture
def failing_source() -> FailingSource:
    return FailingSource()


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until predicate() is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: QOTDServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(5.0):
            raise RuntimeError("Server failed to start")

    def fetch(self) -> bytes:
        """Connect, read until the server closes, return everything received."""
        chunks = []
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            while True:
                data = s.recv(4096)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    @property
    def stopped(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()


@pytest.fixture
def running_server(
    quote_file: Path, config: ServerConfig, reporter: StatusReporter
) -> Generator[RunningServer, None, None]:
    """A QOTD server serving quote_file on an ephemeral port."""
    server = QOTDServer(StaticList.from_file(quote_file), config, reporter)

    test_srv = RunningServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


class BrokenStream:
    """Console stream whose reader has gone away (e.g. `qotd ... | head`)."""

    def __init__(self):
        self.attempts = 0

    def write(self, text: str) -> int:
        self.attempts += 1
        raise BrokenPipeError(32, "Broken pipe")

    def flush(self) -> None:
        raise BrokenPipeError(32, "Broken pipe")

    def isatty(self) -> bool:
        return False
