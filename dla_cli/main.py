#!/usr/bin/env python3
"""
dla - Docker Log Aggregator

Follows the logs of many containers at once and merges them into one
terminal stream, each line tagged with the container it came from.
"""

import sys
import argparse
import logging

from dla_cli import __version__
from dla_cli.cli.commands.logs import LogsCommand
from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.utils.logging import setup_logging
from dla_cli.utils.colors import Colors, colors_enabled


def create_parser():
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="dla",
        description="Docker Log Aggregator - merged, tagged logs of many containers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dla                          # Logs of every running container
  dla web worker               # Logs of the tasks of two Swarm services
  dla -f -t 100 web            # Last 100 lines of each web task, then follow
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"dla v{__version__}"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output except errors"
    )

    LogsCommand.add_arguments(parser)

    return parser


def open_sinks():
    """Open unbuffered binary writers over the process stdout and stderr."""
    out = open(sys.stdout.fileno(), "wb", buffering=0, closefd=False)
    err = open(sys.stderr.fileno(), "wb", buffering=0, closefd=False)
    return FanInWriter(out), FanInWriter(err)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    out_sink, err_sink = open_sinks()

    # Setup logging
    log_level = logging.INFO
    if args.verbose:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    setup_logging(log_level, err_sink)
    logger = logging.getLogger(__name__)

    use_color = colors_enabled(sys.stdout, args.no_color)
    command = LogsCommand(args, out_sink, err_sink, use_color=use_color)

    try:
        return command.run()

    except KeyboardInterrupt:
        message = "Operation cancelled by user"
        if use_color:
            message = Colors.warning(message)
        err_sink.write(f"\n{message}\n".encode('utf-8'))
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
