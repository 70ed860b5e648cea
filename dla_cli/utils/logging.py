"""
Logging setup for the dla CLI.

Streamed container output and the tool's own log records share the
terminal's stderr. When a diagnostic FanInWriter is given, records are
written through it so they never land in the middle of a streamed line.
"""

import logging
import sys
from typing import Optional

from dla_cli.core.streaming.fan_in import FanInWriter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class FanInLogHandler(logging.Handler):
    """Logging handler that writes each record as one atomic line."""

    def __init__(self, sink: FanInWriter, level: int = logging.NOTSET):
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record) + "\n"
            self.sink.write(message.encode('utf-8', errors='replace'))
        except Exception:
            self.handleError(record)


def setup_logging(level: int = logging.INFO, sink: Optional[FanInWriter] = None) -> logging.Handler:
    """
    Configure the root logger.

    Args:
        level: Log level for the root logger
        sink: Diagnostic writer shared with the streaming engine

    Returns:
        The installed handler
    """
    if sink is not None:
        handler = FanInLogHandler(sink)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return handler
