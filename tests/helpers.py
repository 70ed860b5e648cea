"""Fake streams and destinations shared by the tests."""

import io
import threading
import time

from dla_cli.core.streaming.orchestrator import LogStreams


class ChunkedWriter:
    """Destination that accepts at most max_chunk bytes per write call."""

    def __init__(self, max_chunk=None, delay=0.0):
        self.buffer = bytearray()
        self.max_chunk = max_chunk
        self.delay = delay
        self.calls = 0

    def write(self, data):
        chunk = bytes(data) if self.max_chunk is None else bytes(data[:self.max_chunk])
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        self.buffer.extend(chunk)
        return len(chunk)

    def getvalue(self):
        return bytes(self.buffer)

    def lines(self):
        return self.getvalue().splitlines(keepends=True)


class RecordingSink:
    """Sink that records every write call separately."""

    def __init__(self, fail_on=None):
        self.writes = []
        self.fail_on = fail_on

    def write(self, data):
        if self.fail_on is not None and len(self.writes) + 1 == self.fail_on:
            raise OSError("destination closed")
        self.writes.append(bytes(data))
        return len(data)


class BlockingStream:
    """Stream that hands out its lines and then blocks until released."""

    def __init__(self, lines=(), released=None):
        self._lines = list(lines)
        self.released = released or threading.Event()

    def readline(self, limit=-1):
        if self._lines:
            return self._lines.pop(0)
        self.released.wait(5)
        return b""


class FailingStream:
    """Stream that fails after yielding its lines."""

    def __init__(self, lines=(), error=None):
        self._lines = list(lines)
        self._error = error or OSError("connection reset by peer")

    def readline(self, limit=-1):
        if self._lines:
            return self._lines.pop(0)
        raise self._error


def blocking_streams(stdout_lines=(), stderr_lines=()):
    """LogStreams that stay open until close() is called."""
    released = threading.Event()
    return LogStreams(
        stdout=BlockingStream(stdout_lines, released),
        stderr=BlockingStream(stderr_lines, released),
        closer=released.set
    )


def byte_streams(stdout=b"", stderr=b""):
    return LogStreams(stdout=io.BytesIO(stdout), stderr=io.BytesIO(stderr))
