"""Shutdown broadcaster for long-running commands.

Every call to ``new_shutdown_channel`` creates an independent relay: a
subscriber buffer on the signal source plus one background listener task
that forwards each signal into a one-slot channel. Delivery is serialized per
channel; the listener waits for the consumer to take the previous event
before it delivers the next one, so a burst of signals is observed in full
and in order.

Listener lifetime is the process lifetime. Nothing in the one-shot CLI path
ever stops a listener, so every channel that is created and then dropped
leaves one task parked forever on its next delivery. That is acceptable for a
single-shot CLI process and NOT for a long-lived host; such hosts must call
``ShutdownChannel.close`` or ``ShutdownBroadcaster.close_all`` when a channel
is no longer read.
"""

import asyncio
import itertools
import logging
from typing import List, Optional

from opsctl.exceptions import ChannelClosedError
from .models import ShutdownEvent
from .signals import OSSignalSource, SignalSource

logger = logging.getLogger(__name__)


async def relay_signals(relay: asyncio.Queue, channel: asyncio.Queue, name: str) -> None:
    """Forward every event from a subscriber buffer into a channel, forever."""
    while True:
        # Armed
        event = await relay.get()
        # Delivering
        logger.debug(f"{name}: delivering {event.signal_name}")
        await channel.put(event)


class ShutdownChannel:
    """Receive-only view of a shutdown relay."""

    def __init__(self, queue: asyncio.Queue, relay: asyncio.Queue, listener: asyncio.Task,
                 source: SignalSource, name: str):
        self._queue = queue
        self._relay = relay
        self._listener = listener
        self._source = source
        self.name = name
        self._closed = False
        self._closed_event = asyncio.Event()

    async def get(self) -> ShutdownEvent:
        """Wait for the next shutdown event.

        Events already in the channel are returned even after ``close``.

        Raises:
            ChannelClosedError: If the channel is closed and drained, including
                when ``close`` is called while this call is waiting
        """
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._closed:
            raise ChannelClosedError(f"{self.name} is closed")

        getter = asyncio.ensure_future(self._queue.get())
        closer = asyncio.ensure_future(self._closed_event.wait())
        try:
            await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closer.cancel()
            if not getter.done():
                getter.cancel()

        if getter.done() and not getter.cancelled():
            return getter.result()
        raise ChannelClosedError(f"{self.name} is closed")

    def get_nowait(self) -> ShutdownEvent:
        """Return the next event if one is ready, else raise asyncio.QueueEmpty."""
        return self._queue.get_nowait()

    def empty(self) -> bool:
        return self._queue.empty()

    def qsize(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listener(self) -> asyncio.Task:
        return self._listener

    def close(self) -> None:
        """Stop the listener and unsubscribe from the signal source.

        Only for long-lived hosts; the CLI never closes its channels. Events
        already in the channel stay readable; readers blocked in ``get`` or
        ``async for`` are woken and stop.
        """
        if self._closed:
            return
        self._closed = True
        self._source.unsubscribe(self._relay)
        self._listener.cancel()
        self._closed_event.set()
        logger.debug(f"{self.name}: closed")

    def __aiter__(self):
        return self

    async def __anext__(self) -> ShutdownEvent:
        try:
            return await self.get()
        except ChannelClosedError:
            raise StopAsyncIteration

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ShutdownChannel {self.name} {state} pending={self.qsize()}>"


class ShutdownBroadcaster:
    """Creates shutdown channels on demand, all fed by one signal source."""

    def __init__(self, source: Optional[SignalSource] = None, buffer_size: int = 4):
        """Initialize the broadcaster.

        Args:
            source: Signal source to subscribe to (defaults to SIGINT/SIGTERM)
            buffer_size: Undelivered signals kept per channel before dropping
        """
        self.source = source if source is not None else OSSignalSource()
        self.buffer_size = buffer_size
        self._channels: List[ShutdownChannel] = []
        self._counter = itertools.count(1)

    def new_shutdown_channel(self) -> ShutdownChannel:
        """Return a fresh channel that receives one event per signal.

        Starts exactly one listener task on the running event loop.

        Raises:
            RuntimeError: If no event loop is running
            SignalRegistrationError: If the OS signal handlers cannot be installed
        """
        loop = asyncio.get_running_loop()
        relay = self.source.subscribe(self.buffer_size)
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        name = f"shutdown-listener-{next(self._counter)}"
        listener = loop.create_task(relay_signals(relay, queue, name), name=name)
        channel = ShutdownChannel(queue, relay, listener, self.source, name)
        # Strong references keep parked listeners from being garbage collected.
        self._channels.append(channel)
        logger.debug(f"Started {name}")
        return channel

    @property
    def channels(self) -> List[ShutdownChannel]:
        return list(self._channels)

    @property
    def listener_count(self) -> int:
        """Number of listeners that are still running."""
        return sum(1 for channel in self._channels if not channel.closed)

    def close_all(self) -> int:
        """Close every open channel; returns how many were closed."""
        closed = 0
        for channel in self._channels:
            if not channel.closed:
                channel.close()
                closed += 1
        self._channels.clear()
        if closed:
            logger.debug(f"Closed {closed} shutdown listener(s)")
        return closed
