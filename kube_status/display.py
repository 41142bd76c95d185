"""Destinations for rendered output.

A sink receives lines of text, possibly containing ANSI styles, and a `flush`
marks the end of a frame. How a frame is shown is up to the sink: appended to
a terminal, redrawn in place, or kept in memory.
"""

from abc import ABC, abstractmethod
import logging
from types import TracebackType

from rich.console import Console
from rich.live import Live
from rich.text import Text

__all__ = [
    "DisplaySink",
    "StringSink",
    "ConsoleSink",
    "LiveSink",
]

_LOGGER = logging.getLogger(__name__)


class DisplaySink(ABC):
    """Interface for writing frames of output."""

    @abstractmethod
    def write(self, line: str) -> None:
        """Add a line to the current frame."""

    @abstractmethod
    def flush(self) -> None:
        """Complete the current frame."""


class StringSink(DisplaySink):
    """Sink that keeps every flushed frame in memory."""

    def __init__(self) -> None:
        self._pending: list[str] = []
        self.frames: list[list[str]] = []

    def write(self, line: str) -> None:
        self._pending.append(line)

    def flush(self) -> None:
        self.frames.append(self._pending)
        self._pending = []

    @property
    def lines(self) -> list[str]:
        """Return all lines of all flushed frames."""
        return [line for frame in self.frames for line in frame]

    @property
    def last_frame(self) -> list[str]:
        if not self.frames:
            return []
        return self.frames[-1]


class ConsoleSink(DisplaySink):
    """Sink that appends every frame to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)
        self._pending: list[str] = []

    def write(self, line: str) -> None:
        self._pending.append(line)

    def flush(self) -> None:
        for line in self._pending:
            self._console.print(Text.from_ansi(line), soft_wrap=True)
        self._pending = []


class LiveSink(DisplaySink):
    """Sink that redraws the latest frame in place.

    Must be used as a context manager so the terminal is restored on exit.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)
        self._live = Live(
            console=self._console, auto_refresh=False, transient=False
        )
        self._pending: list[str] = []

    def __enter__(self) -> "LiveSink":
        self._live.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._live.stop()

    def write(self, line: str) -> None:
        self._pending.append(line)

    def flush(self) -> None:
        frame = Text.from_ansi("\n".join(self._pending))
        _LOGGER.debug("Redrawing frame of %d lines", len(self._pending))
        self._live.update(frame, refresh=True)
        self._pending = []
