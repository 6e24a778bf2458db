"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every error the server can raise falls into one of two groups:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  FATAL (startup only)          │  RECOVERABLE (per connection)      │
    ├────────────────────────────────┼────────────────────────────────────┤
    │  ConfigError                   │  QuoteError                        │
    │    └── UsageError              │    └── ExternalCommandError        │
    │  BindError                     │  OSError (accept / write / flush)  │
    └─────────────────────────────────────────────────────────────────────┘

Fatal errors abort the process before any client is served.
Recoverable errors are logged and the server moves on to the next client.

Socket I/O failures are not wrapped: they surface as the built-in OSError,
exactly as the socket module raises them.
=============================================================================
"""

from typing import Optional


class QOTDError(Exception):
    """Base class for all errors raised by the qotd package."""


class ConfigError(QOTDError):
    """The server cannot be configured (bad quote file, bad selector)."""


class UsageError(ConfigError):
    """
    The provider selector is missing, unknown, or has the wrong arity.

    Carries the usage text that should be shown to the operator. This is
    not a failure from the service's point of view: it simply did not start.
    """

    def __init__(self, message: str, usage: Optional[str] = None):
        super().__init__(message)
        self.usage = usage


class BindError(QOTDError):
    """The listening socket could not be bound."""

    def __init__(self, host: str, port: int, cause: OSError):
        super().__init__(f"cannot bind to {host}:{port}: {cause.strerror or cause}")
        self.host = host
        self.port = port
        self.cause = cause


class QuoteError(QOTDError):
    """A quote source failed to produce a quote."""


class ExternalCommandError(QuoteError):
    """The quote command could not be run."""
