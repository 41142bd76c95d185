"""
Provides a utility for consuming multiple watch streams in a single loop.
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from dataclasses import dataclass
import logging

from kube_status.exceptions import WatchException
from kube_status.ownership import DEFAULT_DEPLOYMENT_OWNER_KINDS, OwnerKind
from kube_status.resource import WatchEvent

from .selector import Selector
from .source import WatchSource

__all__ = [
    "Stream",
    "WatchMultiplexer",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stream:
    """A watch stream registered with the multiplexer."""

    tag: str
    api_version: str
    kind: str
    selector: Selector

    def __str__(self) -> str:
        return f"{self.tag} ({self.api_version}/{self.kind} {self.selector})"


@dataclass(frozen=True)
class _StreamFailure:
    """Delivered through the queue when a forwarding task stops."""

    stream: Stream
    message: str


class WatchMultiplexer:
    """
    Fans in several watch streams into one ordered sequence of tagged events.

    Each stream is forwarded by its own task into a queue holding at most one
    event, so a slow consumer stalls every producer. Events that do not match
    the selector of their stream are dropped before they reach the queue.
    """

    def __init__(
        self,
        source: WatchSource,
        owner_kinds: Sequence[OwnerKind] = DEFAULT_DEPLOYMENT_OWNER_KINDS,
    ) -> None:
        """
        Initialize the WatchMultiplexer.

        Args:
            source: The WatchSource used to open every stream.
            owner_kinds: The kinds considered Deployment owners by ByOwner selectors.
        """
        self._source = source
        self._owner_kinds = list(owner_kinds)
        self._streams: dict[str, Stream] = {}
        self._tasks: list[asyncio.Task[None]] = []
        self._queue: asyncio.Queue[tuple[str, WatchEvent] | _StreamFailure] = (
            asyncio.Queue(maxsize=1)
        )
        self._started = False

    def add(self, tag: str, api_version: str, kind: str, selector: Selector) -> None:
        """
        Add a stream to watch.

        If the multiplexer has already started, this will raise an error.
        """
        if self._started:
            raise ValueError("Cannot add streams after watching has started.")
        if tag in self._streams:
            raise ValueError(f"Stream {tag} already added.")
        stream = Stream(tag=tag, api_version=api_version, kind=kind, selector=selector)
        _LOGGER.debug("Adding stream %s", stream)
        self._streams[tag] = stream

    async def _forward(self, stream: Stream, events: AsyncIterator[WatchEvent]) -> None:
        """Internal task to forward matching events of a single stream to the queue."""
        try:
            async for event in events:
                if not stream.selector.matches(event.object, self._owner_kinds):
                    _LOGGER.debug(
                        "Dropping %s event for %s from stream %s",
                        event.type,
                        event.name,
                        stream.tag,
                    )
                    continue
                _LOGGER.debug(
                    "Forwarding %s event for %s from stream %s",
                    event.type,
                    event.name,
                    stream.tag,
                )
                await self._queue.put((stream.tag, event))
        except asyncio.CancelledError:
            _LOGGER.debug("Stream %s cancelled", stream.tag)
            raise
        except WatchException as err:
            await self._queue.put(_StreamFailure(stream, err.message))
            return
        except Exception as err:  # pylint: disable=broad-except
            _LOGGER.debug("Stream %s failed", stream.tag, exc_info=True)
            await self._queue.put(_StreamFailure(stream, str(err)))
            return
        await self._queue.put(_StreamFailure(stream, "stream ended"))

    async def events(self) -> AsyncGenerator[tuple[str, WatchEvent], None]:
        """
        Open every stream and yield `(tag, event)` as events arrive.

        All streams are opened before any event is yielded so that a stream
        that cannot be opened fails the whole watch up front.

        Raises:
            WatchException: If a stream cannot be opened or stops.
        """
        if self._started:
            raise RuntimeError("Multiplexer already started.")
        self._started = True

        opened: list[tuple[Stream, AsyncIterator[WatchEvent]]] = []
        for stream in self._streams.values():
            _LOGGER.debug("Opening stream %s", stream)
            try:
                events = await self._source.open(
                    stream.api_version, stream.kind, stream.selector.namespace
                )
            except WatchException:
                raise
            except Exception as err:
                raise WatchException(str(stream), str(err)) from err
            opened.append((stream, events))

        for stream, events in opened:
            self._tasks.append(
                asyncio.create_task(self._forward(stream, events), name=stream.tag)
            )

        try:
            while True:
                item = await self._queue.get()
                if isinstance(item, _StreamFailure):
                    raise WatchException(str(item.stream), item.message)
                yield item
        finally:
            await self.close()

    async def close(self) -> None:
        """Cancel all forwarding tasks and wait for them to finish."""
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            _LOGGER.debug("Cancelling %d stream tasks", len(tasks))
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
