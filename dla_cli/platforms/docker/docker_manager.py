"""
Docker log source management.

This module is the only place that talks to Docker. It covers:
- Listing running containers, optionally by Swarm service name
- Following a container's logs as two binary streams
- Docker prerequisites checking
"""

import logging
import subprocess
from typing import List, Optional

from dla_cli.config.global_config import GlobalConfig
from dla_cli.core.errors import FollowError, ResolutionError
from dla_cli.core.streaming.orchestrator import LogStreams
from dla_cli.core.streaming.resolver import SourceDescriptor
from dla_cli.utils.system.shell import run_command, run_command_async, check_command_exists, ShellError

logger = logging.getLogger(__name__)


class DockerLogSource:
    """Discovers containers and follows their logs through the docker CLI."""

    def __init__(self, config: Optional[GlobalConfig] = None):
        self.config = config or GlobalConfig()
        self.docker = self.config.docker_command

    def check_docker_prerequisites(self) -> bool:
        """Check that the docker CLI is installed."""
        if not check_command_exists(self.docker):
            logger.error(f"{self.docker} is not installed or not on PATH")
            return False
        return True

    def _ps_command(self, service: Optional[str] = None) -> List[str]:
        fmt = f'{{{{.ID}}}}\t{{{{.Names}}}}\t{{{{.Label "{self.config.task_label}"}}}}'
        command = [self.docker, "ps", "--no-trunc", "--format", fmt]
        if service is not None:
            command.extend(["--filter", f"label={self.config.service_label}={service}"])
        return command

    @staticmethod
    def parse_ps_output(output: str) -> List[SourceDescriptor]:
        """
        Parse the tab separated output of the ps command.

        Containers without a task name label are tagged with their
        container name instead.
        """
        sources = []
        for line in output.splitlines():
            if not line.strip():
                continue
            parts = line.split("\t")
            container_id = parts[0].strip()
            names = parts[1].strip() if len(parts) > 1 else ""
            task_name = parts[2].strip() if len(parts) > 2 else ""
            if task_name in ("", "<no value>"):
                task_name = names.split(",")[0] or container_id[:12]
            sources.append(SourceDescriptor(id=container_id, display_name=task_name))
        return sources

    def list_sources(self, service: Optional[str] = None) -> List[SourceDescriptor]:
        """
        List running containers.

        Args:
            service: Only list tasks of this Swarm service when given

        Raises:
            ResolutionError: If docker cannot be queried
        """
        try:
            result = run_command(self._ps_command(service), check=True)
        except ShellError as e:
            raise ResolutionError(str(e)) from e

        sources = self.parse_ps_output(result.stdout)
        logger.debug(f"Found {len(sources)} containers for {service or 'all services'}")
        return sources

    def list_all_sources(self) -> List[SourceDescriptor]:
        """List every running container."""
        return self.list_sources()

    def logs_command(self, container_id: str, follow: bool = False, tail: str = "") -> List[str]:
        """Build the logs command for one container."""
        command = [self.docker, "logs"]
        if follow:
            command.append("--follow")
        if tail:
            command.extend(["--tail", tail])
        command.append(container_id)
        return command

    def open_follow(self, container_id: str, follow: bool = False, tail: str = "") -> LogStreams:
        """
        Start following a container's logs.

        Returns:
            LogStreams over the process pipes

        Raises:
            ShellError: If the docker CLI cannot be started
        """
        process = run_command_async(self.logs_command(container_id, follow, tail))

        def wait() -> None:
            returncode = process.wait()
            for pipe in (process.stdout, process.stderr):
                if pipe is not None:
                    pipe.close()
            if returncode != 0:
                raise FollowError(
                    f"{self.docker} logs exited with code {returncode}",
                    returncode
                )

        def close() -> None:
            if process.poll() is None:
                logger.debug(f"Terminating log follower for {container_id}")
                process.terminate()
                try:
                    process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    process.kill()

        return LogStreams(
            stdout=process.stdout,
            stderr=process.stderr,
            waiter=wait,
            closer=close
        )
