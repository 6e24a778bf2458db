"""
Serve one quote on one connection.

    produce_quote() ──► write(payload) ──► write("\\r\\n") ──► flush() ──► close()
          │
          └── QuoteError ──► payload = "Error: <message>"

A failing quote source still gives the client a complete response; only
socket errors abort the connection, and those propagate to the caller.
"""

import logging
import random

from ..core.connection import Connection
from ..errors import QuoteError
from ..quotes import QuoteSource


logger = logging.getLogger(__name__)


TERMINATOR = b"\r\n"
ERROR_PREFIX = "Error: "


def render_quote(source: QuoteSource, rng: random.Random) -> bytes:
    """
    Ask the source for exactly one quote.

    Returns the quote bytes, or an "Error: ..." payload if the source failed.
    """
    try:
        return source.produce_quote(rng)
    except QuoteError as e:
        logger.debug(f"Quote source failed: {e}")
        return (ERROR_PREFIX + str(e)).encode("utf-8")


def handle(conn: Connection, source: QuoteSource, rng: random.Random) -> None:
    """
    Write one quote plus CRLF to the client, flush, and close.

    The connection is closed whether or not the write succeeds.

    Raises:
        OSError: If writing or flushing fails.
    """
    with conn:
        payload = render_quote(source, rng)
        conn.write(payload)
        conn.write(TERMINATOR)
        conn.flush()
        logger.debug(
            f"[{conn.id}] Sent {len(payload)} byte quote to "
            f"{conn.client_ip}:{conn.client_port} in {conn.age * 1000:.1f}ms"
        )
