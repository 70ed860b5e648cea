import pytest

from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.core.streaming.resolver import SourceDescriptor
from tests.helpers import ChunkedWriter


@pytest.fixture
def out_dest():
    return ChunkedWriter()


@pytest.fixture
def err_dest():
    return ChunkedWriter()


@pytest.fixture
def out_sink(out_dest):
    return FanInWriter(out_dest)


@pytest.fixture
def err_sink(err_dest):
    return FanInWriter(err_dest)


@pytest.fixture
def svc_sources():
    return [
        SourceDescriptor(id="c1", display_name="svc1"),
        SourceDescriptor(id="c22", display_name="svc22"),
    ]
