"""
=============================================================================
QOTD - QUOTE OF THE DAY SERVER
=============================================================================

A small RFC 865 server. Every client that connects gets one quote followed
by CRLF, and the connection is closed. Nothing is read from the client.

    $ nc localhost 17
    An apple a day keeps the doctor away.

=============================================================================
PROJECT STRUCTURE
=============================================================================

    qotd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m qotd)
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Exception taxonomy
    ├── quotes.py            # Quote sources: StaticList, CommandGenerator
    ├── server.py            # QOTDServer: counter, RNG, error reporting
    ├── status.py            # Console status line
    ├── core/
    │   ├── socket_server.py # Listening socket + sequential accept loop
    │   └── connection.py    # Write-only client connection
    └── handlers/
        └── quote.py         # One quote per connection

=============================================================================
QUICK START
=============================================================================

    from qotd import QOTDServer, ServerConfig, StaticList

    source = StaticList.from_file("quotes.txt")
    QOTDServer(source, ServerConfig(port=1717)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .errors import (
    QOTDError,
    ConfigError,
    UsageError,
    BindError,
    QuoteError,
    ExternalCommandError,
)
from .quotes import QuoteSource, StaticList, CommandGenerator, load_source
from .server import QOTDServer
from .status import StatusReporter

__all__ = [
    "QOTDServer",
    "ServerConfig",
    "StatusReporter",
    "QuoteSource",
    "StaticList",
    "CommandGenerator",
    "load_source",
    "QOTDError",
    "ConfigError",
    "UsageError",
    "BindError",
    "QuoteError",
    "ExternalCommandError",
    "__version__",
]
