"""
Stream orchestration.

Runs one task per log source. Each task opens the source's stdout and stderr
streams and frames them into the shared ordinary and diagnostic writers. A
source that cannot be opened aborts the whole run; a source that fails while
streaming only ends its own task.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, Hashable, List, Optional, Sequence

from dla_cli.core.errors import FollowError, StreamOpenError
from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.core.streaming.framer import DEFAULT_MAX_LINE_BYTES, LineFramer
from dla_cli.core.streaming.resolver import SourceDescriptor
from dla_cli.utils.colors import Colors

logger = logging.getLogger(__name__)


@dataclass
class LogStreams:
    """The two live streams of one source plus hooks to await or stop it."""
    stdout: BinaryIO
    stderr: BinaryIO
    waiter: Optional[Callable[[], None]] = None
    closer: Optional[Callable[[], None]] = None

    def wait(self) -> None:
        """Block until the follow call ends; raise FollowError if it failed."""
        if self.waiter is not None:
            self.waiter()

    def close(self) -> None:
        """Ask the producer to stop so both streams reach EOF."""
        if self.closer is not None:
            self.closer()


OpenStreams = Callable[[Hashable], LogStreams]


@dataclass
class RunSummary:
    """Outcome of one orchestrator run."""
    completed: List[str] = field(default_factory=list)
    failures: Dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class StreamOrchestrator:
    """Fans many sources into the ordinary and diagnostic writers."""

    def __init__(
        self,
        tag_lookup: Callable[[str], bytes],
        open_streams: OpenStreams,
        out_sink: FanInWriter,
        err_sink: FanInWriter,
        error_color: Optional[str] = Colors.BRIGHT_RED,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
        join_interval: float = 0.5
    ):
        """
        Initialize the orchestrator.

        Args:
            tag_lookup: Maps a display name to its tag bytes
            open_streams: Opens the streams of a source by id
            out_sink: Writer for ordinary output
            err_sink: Writer for diagnostic output
            error_color: Color applied to stderr lines, None for none
            max_line_bytes: Longest line a framer accepts
            join_interval: Seconds between liveness checks while joining
        """
        self.tag_lookup = tag_lookup
        self.open_streams = open_streams
        self.out_sink = out_sink
        self.err_sink = err_sink
        self.error_color = error_color
        self.max_line_bytes = max_line_bytes
        self.join_interval = join_interval

        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._open: Dict[Hashable, LogStreams] = {}
        self._fatal: Optional[BaseException] = None
        self._summary = RunSummary()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self, descriptors: Sequence[SourceDescriptor]) -> RunSummary:
        """
        Follow every source until all of them have ended.

        Returns:
            RunSummary of completed sources and local failures

        Raises:
            StreamOpenError: If any source could not be opened
            FollowError: If a follow call failed outright
        """
        # Resolve tags up front so a missing one fails before any task starts
        tasks = [(source, self.tag_lookup(source.display_name)) for source in descriptors]

        threads = []
        for source, tag in tasks:
            thread = threading.Thread(
                target=self._follow,
                args=(source, tag),
                name=f"follow-{source.display_name}",
                daemon=True
            )
            thread.start()
            threads.append(thread)

        for thread in threads:
            # Timed joins keep the main thread responsive to KeyboardInterrupt
            while thread.is_alive():
                thread.join(self.join_interval)

        if self._fatal is not None:
            raise self._fatal
        return self._summary

    def stop(self) -> None:
        """Stop every running task; safe to call from any thread."""
        with self._lock:
            self._stop.set()
            streams = list(self._open.values())
        for handle in streams:
            try:
                handle.close()
            except Exception as e:
                logger.debug(f"Error while closing a stream: {e}")

    def _abort(self, error: BaseException) -> None:
        with self._lock:
            if self._fatal is None:
                self._fatal = error
        self.stop()

    def _follow(self, source: SourceDescriptor, tag: bytes) -> None:
        name = source.display_name
        try:
            streams = self.open_streams(source.id)
        except Exception as e:
            error = StreamOpenError(name, e)
            logger.error(str(error))
            self._abort(error)
            return

        with self._lock:
            stopped = self._stop.is_set()
            if not stopped:
                self._open[source.id] = streams
        if stopped:
            streams.close()
            return

        try:
            self._stream(source, tag, streams)
        finally:
            with self._lock:
                self._open.pop(source.id, None)

    def _stream(self, source: SourceDescriptor, tag: bytes, streams: LogStreams) -> None:
        name = source.display_name
        framers = [
            LineFramer(
                streams.stdout, tag, self.out_sink,
                color=None,
                name=name,
                max_line_bytes=self.max_line_bytes,
                stop_event=self._stop
            ),
            LineFramer(
                streams.stderr, tag, self.err_sink,
                color=self.error_color,
                name=name,
                max_line_bytes=self.max_line_bytes,
                stop_event=self._stop
            ),
        ]

        def frame(framer: LineFramer) -> None:
            if framer.run() is not None:
                # Unblock the producer; nobody drains this source anymore
                streams.close()

        threads = [
            threading.Thread(target=frame, args=(framer,), name=f"frame-{name}", daemon=True)
            for framer in framers
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        errors = [framer.error for framer in framers if framer.error is not None]

        try:
            streams.wait()
        except FollowError as e:
            if self._stop.is_set() or errors:
                logger.debug(f"Follow call for {name} ended after shutdown: {e}")
            else:
                error = FollowError(f"Logger failed for {name}: {e}", e.returncode)
                logger.error(str(error))
                self._abort(error)
                return
        except Exception as e:
            if self._stop.is_set():
                logger.debug(f"Waiting on {name} failed after shutdown: {e}")
            else:
                logger.error(f"Error waiting for {name} to finish: {e}")
                errors.append(e)

        with self._lock:
            if errors:
                self._summary.failures[name] = errors[0]
            else:
                self._summary.completed.append(name)

        if errors:
            logger.warning(f"Stream {name} stopped early: {errors[0]}")
        elif self._stop.is_set():
            logger.debug(f"Stream {name} stopped.")
        else:
            self._announce_exit(name)

    def _announce_exit(self, name: str) -> None:
        try:
            self.out_sink.write(f"Stream {name} exited.\n".encode("utf-8"))
        except Exception as e:
            logger.error(f"Error writing exit notice for {name}: {e}")
