"""
Shell command execution utilities.
"""

import subprocess
import shlex
import logging
from typing import List, Union

logger = logging.getLogger(__name__)


class ShellError(Exception):
    """Exception raised when shell command fails."""
    pass


def run_command(
    command: Union[str, List[str]],
    capture_output: bool = True,
    check: bool = True
) -> subprocess.CompletedProcess:
    """
    Run a shell command.

    Args:
        command: Command to run (string or list)
        capture_output: Whether to capture stdout/stderr
        check: Whether to raise exception on non-zero exit

    Returns:
        CompletedProcess object

    Raises:
        ShellError: If command fails and check=True, or cannot be started
    """
    if isinstance(command, str):
        command = shlex.split(command)

    logger.debug(f"Running command: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            capture_output=capture_output,
            check=check,
            text=True
        )

        if capture_output and result.stdout:
            logger.debug(f"Command output: {result.stdout}")
        if capture_output and result.stderr:
            logger.debug(f"Command stderr: {result.stderr}")

        return result

    except subprocess.CalledProcessError as e:
        error_msg = f"Command failed with exit code {e.returncode}: {' '.join(command)}"
        if e.stderr:
            error_msg += f": {e.stderr.strip()}"

        logger.debug(error_msg)
        raise ShellError(error_msg) from e

    except OSError as e:
        error_msg = f"Unable to run {command[0]}: {e}"
        logger.debug(error_msg)
        raise ShellError(error_msg) from e


def run_command_async(command: Union[str, List[str]]) -> subprocess.Popen:
    """
    Run a shell command asynchronously with binary stdout/stderr pipes.

    Args:
        command: Command to run (string or list)

    Returns:
        Popen object

    Raises:
        ShellError: If the command cannot be started
    """
    if isinstance(command, str):
        command = shlex.split(command)

    logger.debug(f"Running async command: {' '.join(command)}")

    try:
        return subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE
        )
    except OSError as e:
        raise ShellError(f"Unable to run {command[0]}: {e}") from e


def check_command_exists(command: str) -> bool:
    """
    Check if a command exists in PATH.

    Args:
        command: Command name to check

    Returns:
        True if command exists, False otherwise
    """
    try:
        run_command(f"which {command}", check=True)
        return True
    except ShellError:
        return False
