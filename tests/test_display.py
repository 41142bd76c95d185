"""Tests for display sinks."""

import io

from rich.console import Console

from kube_status.display import ConsoleSink, LiveSink, StringSink
from kube_status.status.lines import Style, ansi


def test_string_sink() -> None:
    """Test frames are recorded when flushed."""
    sink = StringSink()
    assert sink.last_frame == []
    sink.write("a")
    sink.write("b")
    sink.flush()
    sink.write("c")
    assert sink.frames == [["a", "b"]]
    sink.flush()
    assert sink.frames == [["a", "b"], ["c"]]
    assert sink.last_frame == ["c"]
    assert sink.lines == ["a", "b", "c"]


def test_console_sink() -> None:
    """Test frames are appended to the console."""
    out = io.StringIO()
    sink = ConsoleSink(Console(file=out, force_terminal=False, width=120))
    sink.write("first [Ready] line")
    sink.write(ansi(Style.SUCCESS, "second"))
    assert out.getvalue() == ""
    sink.flush()
    assert out.getvalue() == "first [Ready] line\nsecond\n"


def test_live_sink() -> None:
    """Test the live sink renders the latest frame."""
    out = io.StringIO()
    console = Console(file=out, force_terminal=False, width=120)
    with LiveSink(console) as sink:
        sink.write("frame one")
        sink.flush()
        sink.write("frame two")
        sink.flush()
    assert "frame two" in out.getvalue()
