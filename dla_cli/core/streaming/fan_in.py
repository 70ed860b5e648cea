"""
Serialized writer shared by every streaming task.

Many framers write tagged lines to the same terminal at once. The
FanInWriter makes each write call land on the destination as one contiguous
run of bytes, so lines from different containers never tear each other.
"""

import logging
import select
import threading
from typing import BinaryIO

from dla_cli.core.errors import ShortWriteError

logger = logging.getLogger(__name__)


def _wait_writable(out: BinaryIO) -> bool:
    """Block until out's file descriptor can take more bytes."""
    try:
        fd = out.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    select.select([], [fd], [])
    return True


def full_write(out: BinaryIO, data: bytes) -> int:
    """
    Write all of data to out, retrying on partial writes.

    A raw non-blocking destination returns None when it cannot take any
    bytes yet. The writer then waits for its descriptor to become writable
    and tries again.

    Args:
        out: Binary destination (raw or buffered)
        data: Bytes to transfer

    Returns:
        Number of bytes written (always len(data) on success)

    Raises:
        ShortWriteError: If the destination accepts zero bytes
        OSError: If the destination fails
    """
    view = memoryview(data)
    written = 0
    while written < len(view):
        n = out.write(view[written:])
        if n is None:
            if _wait_writable(out):
                continue
            raise ShortWriteError(
                f"Destination would block with {len(view) - written} bytes remaining"
            )
        if n == 0:
            raise ShortWriteError(
                f"Destination accepted 0 of {len(view) - written} remaining bytes"
            )
        written += n
    return written


class FanInWriter:
    """Lock-serialized writer around a single destination."""

    def __init__(self, out: BinaryIO):
        """
        Initialize the writer.

        Args:
            out: Destination owned by this writer for its whole lifetime
        """
        if out is None:
            raise ValueError("FanInWriter requires a destination")
        self._out = out
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        """Write data atomically with respect to other callers."""
        with self._lock:
            return full_write(self._out, data)
