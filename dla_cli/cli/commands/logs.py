"""
Logs command: follow many containers and merge their output.
"""

import argparse
import logging
from typing import Optional

from dla_cli.config.global_config import GlobalConfig, load_global_config
from dla_cli.core.errors import ConfigError, FollowError, ResolutionError, StreamOpenError
from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.core.streaming.orchestrator import StreamOrchestrator
from dla_cli.core.streaming.resolver import resolve_sources
from dla_cli.core.streaming.tags import build_tag_table
from dla_cli.platforms.docker.docker_manager import DockerLogSource
from dla_cli.utils.colors import Colors, Palette, color_code

logger = logging.getLogger(__name__)


class LogsCommand:
    """Command to follow the logs of matching containers."""

    def __init__(
        self,
        args: argparse.Namespace,
        out_sink: FanInWriter,
        err_sink: FanInWriter,
        config: Optional[GlobalConfig] = None,
        source: Optional[DockerLogSource] = None,
        use_color: bool = True
    ):
        """
        Initialize the command.

        Args:
            args: Parsed command line arguments
            out_sink: Writer for ordinary output
            err_sink: Writer for diagnostic output
            config: Settings; loaded from args.config when omitted
            source: Container backend; docker CLI when omitted
            use_color: Whether ANSI colors may be written
        """
        self.args = args
        self.out_sink = out_sink
        self.err_sink = err_sink
        self.config = config
        self.source = source
        self.use_color = use_color and not getattr(args, 'no_color', False)
        self.orchestrator: Optional[StreamOrchestrator] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def _say(self, sink: FanInWriter, text: str) -> None:
        sink.write((text + "\n").encode('utf-8'))

    def _fail(self, message: str) -> int:
        text = Colors.error(message) if self.use_color else message
        self._say(self.err_sink, text)
        return 1

    def run(self) -> int:
        """Run the logs command."""
        try:
            if self.config is None:
                self.config = load_global_config(getattr(self.args, 'config', None))
            palette = Palette.from_names(self.config.palette, self.use_color)
            error_color = color_code(self.config.error_color, self.use_color)
        except ConfigError as e:
            return self._fail(f"Invalid configuration: {e}")

        if self.source is None:
            self.source = DockerLogSource(self.config)
            if not self.source.check_docker_prerequisites():
                return self._fail(f"Unable to setup connection to docker: {self.config.docker_command} not found")

        try:
            sources = resolve_sources(
                self.args.services,
                self.source.list_all_sources,
                self.source.list_sources
            )
        except ResolutionError as e:
            return self._fail(f"Error retrieving container information: {e}")

        if not sources:
            self._say(self.out_sink, "No services meet the criteria")
            return 0

        tail = self.args.tail if self.args.tail is not None else self.config.tail
        follow = self.args.follow

        self.logger.debug(
            f"Streaming {len(sources)} containers (follow={follow}, tail={tail or 'all'})"
        )

        tags = build_tag_table(
            [s.display_name for s in sources],
            self.config.separator,
            palette
        )

        def open_streams(container_id):
            return self.source.open_follow(container_id, follow, tail)

        self.orchestrator = StreamOrchestrator(
            tags,
            open_streams,
            self.out_sink,
            self.err_sink,
            error_color=error_color or None,
            max_line_bytes=self.config.max_line_bytes
        )

        try:
            summary = self.orchestrator.run(sources)
        except KeyboardInterrupt:
            self.orchestrator.stop()
            raise
        except (StreamOpenError, FollowError):
            # Already reported by the orchestrator
            return 1

        if not summary.ok:
            failed = ', '.join(sorted(summary.failures))
            self.logger.error(f"Streaming failed for: {failed}")
            return 1
        return 0

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Add logs command arguments."""
        parser.add_argument(
            "services",
            nargs="*",
            help="Swarm service names to follow (default: all running containers)"
        )

        parser.add_argument(
            "--follow", "-f",
            action="store_true",
            help="Follow log output"
        )

        parser.add_argument(
            "--tail", "-t",
            default=None,
            help="Number of lines to show from the end of each log (default: all)"
        )

        parser.add_argument(
            "--no-color",
            action="store_true",
            help="Disable colored output"
        )

        parser.add_argument(
            "--config", "-c",
            default=None,
            help="Path to a dla-config.yml file"
        )
