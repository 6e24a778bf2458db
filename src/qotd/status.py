"""
Operator console output.

The status line is redrawn in place when the console is a terminal, so the
operator sees a single live counter. When output is redirected to a file or
pipe, every update becomes its own line instead.

    3 quotes served                               ← redrawn in place
    [2024-06-10 10:55:36.123] Error: Broken pipe  ← one line per failure
    4 quotes served
"""

import logging
import sys
from datetime import datetime
from typing import Optional, TextIO


logger = logging.getLogger(__name__)


CLEAR_LINE = "\r\x1b[K"


def format_loaded(size: Optional[int]) -> str:
    if size is None:
        return "infinitely many quotes loaded"
    if size == 1:
        return "1 quote loaded"
    return f"{size} quotes loaded"


def format_count(count: int) -> str:
    if count == 1:
        return "1 quote served"
    return f"{count} quotes served"


def format_timestamp(timestamp: datetime) -> str:
    """2024-06-10 10:55:36.123 (millisecond precision)."""
    return timestamp.strftime("%Y-%m-%d %H:%M:%S.") + f"{timestamp.microsecond // 1000:03d}"


def format_error(timestamp: datetime, message: str) -> str:
    return f"[{format_timestamp(timestamp)}] Error: {message}"


class StatusReporter:
    """
    Renders the served count and error lines to a text stream.

    Holds no state beyond where to write and how. A console that can no
    longer be written to (closed pipe, full disk) is logged and ignored:
    reporting never stops the server.
    """

    def __init__(self, stream: Optional[TextIO] = None, redraw: Optional[bool] = None):
        self.stream = stream if stream is not None else sys.stdout
        if redraw is None:
            isatty = getattr(self.stream, "isatty", None)
            redraw = bool(isatty and isatty())
        self.redraw = redraw

    def report_loaded(self, size: Optional[int]) -> None:
        self._write_line(format_loaded(size))

    def report_count(self, count: int) -> None:
        if self.redraw:
            self._emit(CLEAR_LINE + format_count(count))
        else:
            self._write_line(format_count(count))

    def report_error(self, timestamp: datetime, message: str) -> None:
        self._write_line(format_error(timestamp, message))

    def _write_line(self, line: str) -> None:
        if self.redraw:
            line = CLEAR_LINE + line
        self._emit(line + "\n")

    def _emit(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as e:
            logger.debug(f"Status output failed: {e}")
