"""Tests for line framing."""

import io
import logging
import threading

import pytest

from dla_cli.core.errors import LineTooLongError
from dla_cli.core.streaming.fan_in import FanInWriter
from dla_cli.core.streaming.framer import LineFramer, iter_lines, strip_terminator
from dla_cli.utils.colors import Colors
from tests.helpers import ChunkedWriter, FailingStream, RecordingSink


class TestIterLines:
    def test_unterminated_last_line(self):
        lines = list(iter_lines(io.BytesIO(b"a\nb\nc")))
        assert lines == [b"a\n", b"b\n", b"c"]

    def test_terminated_last_line(self):
        lines = list(iter_lines(io.BytesIO(b"a\nb\n")))
        assert lines == [b"a\n", b"b\n"]

    def test_empty_stream(self):
        assert list(iter_lines(io.BytesIO(b""))) == []

    def test_blank_lines_are_kept(self):
        assert list(iter_lines(io.BytesIO(b"\n\nx\n"))) == [b"\n", b"\n", b"x\n"]

    def test_line_at_limit_is_accepted(self):
        assert list(iter_lines(io.BytesIO(b"abcd\n"), max_line_bytes=5)) == [b"abcd\n"]

    def test_line_over_limit_raises(self):
        with pytest.raises(LineTooLongError):
            list(iter_lines(io.BytesIO(b"x" * 10 + b"\n"), max_line_bytes=5))


class TestStripTerminator:
    @pytest.mark.parametrize("line,expected", [
        (b"abc\n", b"abc"),
        (b"abc\r\n", b"abc"),
        (b"abc", b"abc"),
        (b"abc\r", b"abc"),
        (b"a\rb\n", b"a\rb"),
        (b"\n", b""),
    ])
    def test_strip(self, line, expected):
        assert strip_terminator(line) == expected


class TestLineFramer:
    def test_tags_every_line(self):
        dest = ChunkedWriter(max_chunk=2)
        framer = LineFramer(io.BytesIO(b"hello\nworld"), b"T| ", FanInWriter(dest), name="svc")

        assert framer.run() is None
        assert dest.getvalue() == b"T| hello\nT| world\n"
        assert framer.lines_written == 2

    def test_one_write_per_line(self):
        sink = RecordingSink()
        LineFramer(io.BytesIO(b"a\nb\r\nc"), b"T| ", sink).run()
        assert sink.writes == [b"T| a\n", b"T| b\n", b"T| c\n"]

    def test_color_wraps_content_only(self):
        sink = RecordingSink()
        LineFramer(io.BytesIO(b"oops\n"), b"T| ", sink, color=Colors.RED).run()
        assert sink.writes == [b"T| " + Colors.RED.encode() + b"oops" + Colors.RESET.encode() + b"\n"]

    def test_read_error_stops_and_is_reported(self, caplog):
        sink = RecordingSink()
        framer = LineFramer(FailingStream([b"first\n"]), b"T| ", sink, name="svc-b")

        with caplog.at_level(logging.ERROR):
            error = framer.run()

        assert isinstance(error, OSError)
        assert framer.error is error
        assert sink.writes == [b"T| first\n"]
        assert "svc-b" in caplog.text

    def test_write_error_stops_without_draining(self, caplog):
        source = io.BytesIO(b"1\n2\n3\n")
        sink = RecordingSink(fail_on=2)
        framer = LineFramer(source, b"", sink, name="svc-w")

        with caplog.at_level(logging.ERROR):
            error = framer.run()

        assert isinstance(error, OSError)
        assert sink.writes == [b"1\n"]
        assert source.read() == b"3\n"
        assert "svc-w" in caplog.text

    def test_overlong_line_is_a_read_error(self):
        sink = RecordingSink()
        framer = LineFramer(io.BytesIO(b"ok\n" + b"x" * 100), b"", sink, max_line_bytes=10)

        assert isinstance(framer.run(), LineTooLongError)
        assert sink.writes == [b"ok\n"]

    def test_stop_event_prevents_reading(self):
        stop = threading.Event()
        stop.set()
        sink = RecordingSink()
        framer = LineFramer(io.BytesIO(b"a\n"), b"", sink, stop_event=stop)

        assert framer.run() is None
        assert sink.writes == []
