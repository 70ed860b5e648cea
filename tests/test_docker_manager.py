"""Tests for the docker CLI log source."""

import io
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from dla_cli.config.global_config import GlobalConfig
from dla_cli.core.errors import FollowError, ResolutionError
from dla_cli.core.streaming.resolver import SourceDescriptor
from dla_cli.platforms.docker.docker_manager import DockerLogSource
from dla_cli.utils.system.shell import ShellError

MODULE = "dla_cli.platforms.docker.docker_manager"


def _completed(stdout):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr="")


class TestParsePsOutput:
    def test_uses_task_name_label(self):
        output = "abc123\tweb.1.zz\tweb.1.zzq8\ndef456\tweb.2.yy\tweb.2.yyr1\n"
        assert DockerLogSource.parse_ps_output(output) == [
            SourceDescriptor("abc123", "web.1.zzq8"),
            SourceDescriptor("def456", "web.2.yyr1"),
        ]

    def test_falls_back_to_container_name(self):
        output = "abc123\tredis,alias\t<no value>\n"
        assert DockerLogSource.parse_ps_output(output) == [SourceDescriptor("abc123", "redis")]

    def test_skips_blank_lines(self):
        assert DockerLogSource.parse_ps_output("\n\n") == []


class TestListSources:
    def test_filters_by_service_label(self):
        source = DockerLogSource(GlobalConfig())
        with patch(f"{MODULE}.run_command", return_value=_completed("id1\tn\tweb.1\n")) as run:
            result = source.list_sources("web")

        command = run.call_args[0][0]
        assert command[:3] == ["docker", "ps", "--no-trunc"]
        assert command[-2:] == ["--filter", "label=com.docker.swarm.service.name=web"]
        assert result == [SourceDescriptor("id1", "web.1")]

    def test_all_sources_has_no_filter(self):
        source = DockerLogSource(GlobalConfig())
        with patch(f"{MODULE}.run_command", return_value=_completed("")) as run:
            assert source.list_all_sources() == []
        assert "--filter" not in run.call_args[0][0]

    def test_docker_failure_is_a_resolution_error(self):
        source = DockerLogSource(GlobalConfig())
        with patch(f"{MODULE}.run_command", side_effect=ShellError("Cannot connect to the Docker daemon")):
            with pytest.raises(ResolutionError, match="Cannot connect"):
                source.list_sources("web")

    def test_custom_docker_command(self):
        source = DockerLogSource(GlobalConfig(docker_command="podman"))
        with patch(f"{MODULE}.run_command", return_value=_completed("")) as run:
            source.list_sources()
        assert run.call_args[0][0][0] == "podman"


class TestOpenFollow:
    def test_logs_command_flags(self):
        source = DockerLogSource()
        assert source.logs_command("abc") == ["docker", "logs", "abc"]
        assert source.logs_command("abc", follow=True, tail="10") == [
            "docker", "logs", "--follow", "--tail", "10", "abc"
        ]

    def _process(self, returncode=0, running=False):
        process = MagicMock()
        process.stdout = io.BytesIO(b"out\n")
        process.stderr = io.BytesIO(b"err\n")
        process.wait.return_value = returncode
        process.poll.return_value = None if running else returncode
        return process

    def test_streams_are_process_pipes(self):
        process = self._process()
        with patch(f"{MODULE}.run_command_async", return_value=process) as start:
            streams = DockerLogSource().open_follow("abc", follow=True, tail="5")

        start.assert_called_once_with(["docker", "logs", "--follow", "--tail", "5", "abc"])
        assert streams.stdout.read() == b"out\n"
        assert streams.stderr.read() == b"err\n"
        streams.wait()

    def test_non_zero_exit_raises_follow_error(self):
        with patch(f"{MODULE}.run_command_async", return_value=self._process(returncode=1)):
            streams = DockerLogSource().open_follow("abc")

        with pytest.raises(FollowError) as excinfo:
            streams.wait()
        assert excinfo.value.returncode == 1

    def test_close_terminates_running_process(self):
        process = self._process(running=True)
        with patch(f"{MODULE}.run_command_async", return_value=process):
            streams = DockerLogSource().open_follow("abc", follow=True)

        streams.close()
        process.terminate.assert_called_once()

    def test_close_after_exit_does_nothing(self):
        process = self._process()
        with patch(f"{MODULE}.run_command_async", return_value=process):
            DockerLogSource().open_follow("abc").close()
        process.terminate.assert_not_called()

    def test_missing_docker_binary(self):
        with patch(f"{MODULE}.run_command_async", side_effect=ShellError("Unable to run docker")):
            with pytest.raises(ShellError):
                DockerLogSource().open_follow("abc")


class TestPrerequisites:
    def test_missing_docker(self):
        with patch(f"{MODULE}.check_command_exists", return_value=False):
            assert DockerLogSource().check_docker_prerequisites() is False

    def test_docker_present(self):
        with patch(f"{MODULE}.check_command_exists", return_value=True):
            assert DockerLogSource().check_docker_prerequisites() is True
