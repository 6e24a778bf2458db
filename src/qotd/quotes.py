"""
=============================================================================
QUOTE SOURCES
=============================================================================

A quote source supplies the payload for one response. There are exactly
two kinds:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │  StaticList          │  Lines loaded once from a file at startup.   │
    │                      │  Each request picks one at random.           │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  CommandGenerator    │  Runs an external command per request and    │
    │                      │  returns whatever it printed on stdout.      │
    └──────────────────────┴──────────────────────────────────────────────┘

Both implement the same two methods:

    produce_quote(rng) -> bytes        The payload (no line terminator)
    known_size()       -> int | None   How many quotes exist (None = unbounded)

The random generator is NOT owned by the source. The server owns it and
lends it to each call, so there is no hidden module-level state.

=============================================================================
QUOTE FILE FORMAT
=============================================================================

One quote per line. Surrounding whitespace is trimmed and blank lines are
dropped:

    "a\\n\\nb\\n  c  \\n"   →   ("a", "b", "c")

Invalid UTF-8 is replaced rather than rejected. A file without a single
usable line is a configuration error.

=============================================================================
"""

import logging
import random
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .errors import ConfigError, ExternalCommandError, UsageError


logger = logging.getLogger(__name__)


USAGE = (
    "Usage: qotd [provider] [...args]\n"
    "where provider is one of: file, cmd"
)
FILE_USAGE = "Usage: qotd file [path]"
CMD_USAGE = "Usage: qotd cmd [cmd] [...args]"


class QuoteSource(ABC):
    """Something that can produce one quote per request."""

    @abstractmethod
    def produce_quote(self, rng: random.Random) -> bytes:
        """
        Produce the payload for one response.

        Raises:
            QuoteError: If no quote could be produced.
        """

    @abstractmethod
    def known_size(self) -> Optional[int]:
        """Number of distinct quotes, or None if unbounded."""


@dataclass(frozen=True)
class StaticList(QuoteSource):
    """
    A fixed list of quotes loaded from a file.

    Immutable after construction, and never empty.
    """

    entries: Tuple[str, ...]

    def __post_init__(self):
        if not self.entries:
            raise ConfigError("quote list is empty")

    @classmethod
    def from_text(cls, text: str) -> "StaticList":
        """Build a list from file contents, one quote per non-blank line."""
        entries = []
        for line in text.split("\n"):
            line = line.strip()
            if line:
                entries.append(line)
        return cls(tuple(entries))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticList":
        """
        Load quotes from a file.

        Raises:
            ConfigError: If the file can't be read or has no usable lines.
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ConfigError(f"cannot read quote file {str(path)!r}: {e.strerror or e}") from e

        try:
            return cls.from_text(raw.decode("utf-8", errors="replace"))
        except ConfigError:
            raise ConfigError(f"quote file {str(path)!r} contains no quotes") from None

    def produce_quote(self, rng: random.Random) -> bytes:
        return rng.choice(self.entries).encode("utf-8")

    def known_size(self) -> Optional[int]:
        return len(self.entries)


@dataclass(frozen=True)
class CommandGenerator(QuoteSource):
    """
    Runs an external command for every quote.

    The command's stdout is returned verbatim: no trimming, and a non-zero
    exit status is not treated as a failure. Only a command that cannot be
    started at all is an error.
    """

    argv: Tuple[str, ...]

    def __post_init__(self):
        if not self.argv:
            raise ConfigError("quote command is empty")

    @property
    def executable(self) -> str:
        return self.argv[0]

    def produce_quote(self, rng: random.Random) -> bytes:
        try:
            result = subprocess.run(
                list(self.argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalCommandError(
                f"cannot run {self.executable!r}: {e.strerror or e}"
            ) from e

        if result.returncode != 0:
            logger.debug(
                f"{self.executable!r} exited with status {result.returncode}: "
                f"{result.stderr.decode('utf-8', errors='replace').strip()}"
            )
        return result.stdout

    def known_size(self) -> Optional[int]:
        return None


def load_source(provider: Optional[str], args: Sequence[str]) -> QuoteSource:
    """
    Build a quote source from a provider name and its arguments.

        load_source("file", ["quotes.txt"])       → StaticList
        load_source("cmd", ["fortune", "-s"])     → CommandGenerator

    Raises:
        UsageError: Missing or unknown provider, or wrong number of args.
        ConfigError: The quote file could not be loaded.
    """
    if not provider:
        raise UsageError("no provider given", USAGE)

    name = provider.lower()
    if name == "file":
        if len(args) != 1:
            raise UsageError("file takes exactly one path", FILE_USAGE)
        return StaticList.from_file(args[0])

    if name == "cmd":
        if not args:
            raise UsageError("cmd needs a command to run", CMD_USAGE)
        return CommandGenerator(tuple(args))

    raise UsageError(f'invalid provider "{name}"', f'invalid provider "{name}"\n{USAGE}')
