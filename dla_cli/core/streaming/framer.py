"""
Line framing for raw log streams.

A LineFramer pulls bytes from one container stream, cuts them into lines and
hands each line, tagged and optionally colored, to a FanInWriter as a single
write. Memory use is bounded by the longest allowed line, never by the
length of the stream.
"""

import logging
import threading
from typing import BinaryIO, Iterator, Optional

from dla_cli.core.errors import LineTooLongError
from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.utils.colors import Colors

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_BYTES = 64 * 1024


def iter_lines(stream: BinaryIO, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> Iterator[bytes]:
    """
    Yield newline-terminated lines from a binary stream.

    The final line is yielded without a terminator if the stream ends
    without one.

    Raises:
        LineTooLongError: If a line is longer than max_line_bytes
        OSError: If reading from the stream fails
    """
    while True:
        line = stream.readline(max_line_bytes + 1)
        if not line:
            return
        if len(line) > max_line_bytes:
            raise LineTooLongError(f"Line exceeds {max_line_bytes} bytes")
        yield line


def strip_terminator(line: bytes) -> bytes:
    """Remove a trailing newline and a trailing carriage return."""
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


class LineFramer:
    """Binds one input stream to one tag, one color and one sink."""

    def __init__(
        self,
        source: BinaryIO,
        tag: bytes,
        sink: FanInWriter,
        color: Optional[str] = None,
        name: str = "",
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
        stop_event: Optional[threading.Event] = None
    ):
        self.source = source
        self.tag = tag
        self.sink = sink
        self.color = color
        self.name = name
        self.max_line_bytes = max_line_bytes
        self.stop_event = stop_event
        self.lines_written = 0
        self.error: Optional[BaseException] = None

    def format_line(self, line: bytes) -> bytes:
        """Build the unit written to the sink for one framed line."""
        content = strip_terminator(line)
        if self.color:
            content = Colors.colorize_bytes(content, self.color)
        return self.tag + content + b"\n"

    def run(self) -> Optional[BaseException]:
        """
        Consume the source until EOF, an error, or a stop request.

        Returns:
            The read or write error that ended framing, or None on clean EOF
        """
        lines = iter_lines(self.source, self.max_line_bytes)
        while True:
            if self.stop_event is not None and self.stop_event.is_set():
                break

            try:
                line = next(lines)
            except StopIteration:
                break
            except Exception as e:
                if self.stop_event is not None and self.stop_event.is_set():
                    break
                logger.error(f"Error receiving log data from {self.name}: {e}")
                self.error = e
                break

            try:
                self.sink.write(self.format_line(line))
            except Exception as e:
                logger.error(f"Error writing log line from {self.name} to destination: {e}")
                self.error = e
                break
            self.lines_written += 1

        logger.debug(f"Framer for {self.name} finished after {self.lines_written} lines")
        return self.error

