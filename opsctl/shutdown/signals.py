"""Process signal sources with fan-out to independent subscribers.

An event loop holds at most one handler per signal, so the process subscribes
to the OS once and every shutdown relay gets its own buffer fed from that
single subscription.
"""

import asyncio
import logging
import signal
from typing import Iterable, List, Optional, Union

from opsctl.exceptions import SignalRegistrationError
from .models import ShutdownEvent

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalSource:
    """Fan-out hub for shutdown signals.

    Every subscriber owns a bounded buffer. ``notify`` puts one event into
    each buffer; a full buffer drops the event for that subscriber only, the
    same way OS signal notification drops signals nobody is ready for.

    This base class never touches the OS, so tests and embedding hosts can
    drive it directly with ``notify``.
    """

    def __init__(self):
        self._subscribers: List[asyncio.Queue] = []

    def subscribe(self, buffer_size: int = 4) -> asyncio.Queue:
        """Register a new subscriber buffer.

        Args:
            buffer_size: Number of undelivered signals kept for this subscriber

        Returns:
            Queue receiving one ShutdownEvent per notified signal
        """
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        queue: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)
        self._subscribers.append(queue)
        logger.debug(f"Signal subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)
            logger.debug(f"Signal subscriber removed ({len(self._subscribers)} total)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def notify(self, signum: Union[signal.Signals, int]) -> int:
        """Deliver one signal to every current subscriber.

        Must be called from the event loop thread.

        Returns:
            Number of subscribers that accepted the event
        """
        event = ShutdownEvent.from_signal(signum)
        if not self._subscribers:
            logger.warning(f"Ignored {event.signal_name}: no shutdown listeners")
            return 0
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Dropped {event.signal_name}: subscriber buffer full")
        logger.debug(f"Received {event.signal_name}, delivered to {delivered} subscriber(s)")
        return delivered


class OSSignalSource(SignalSource):
    """SignalSource fed by real process signals.

    Handlers are installed on the running event loop the first time anything
    subscribes and are never removed for the life of the process.
    """

    def __init__(self, signals: Optional[Iterable[Union[signal.Signals, int]]] = None):
        super().__init__()
        self.signals = tuple(signal.Signals(s) for s in (signals if signals is not None else DEFAULT_SIGNALS))
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def installed(self) -> bool:
        return self._loop is not None and not self._loop.is_closed()

    def subscribe(self, buffer_size: int = 4) -> asyncio.Queue:
        self.install()
        return super().subscribe(buffer_size)

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Install process signal handlers on the event loop.

        Raises:
            SignalRegistrationError: If any handler cannot be installed
        """
        loop = loop or asyncio.get_running_loop()
        if self._loop is loop and not loop.is_closed():
            return

        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.notify, sig)
            except NotImplementedError:
                # No loop signal support on this platform (Windows)
                self._install_fallback(loop, sig)
            except (ValueError, RuntimeError, OSError) as e:
                raise SignalRegistrationError(f"Failed to register handler for {sig.name}: {e}") from e

        self._loop = loop
        logger.info(f"Installed shutdown handlers for {', '.join(s.name for s in self.signals)}")

    def _install_fallback(self, loop: asyncio.AbstractEventLoop, sig: signal.Signals) -> None:
        def handler(signum, frame):
            loop.call_soon_threadsafe(self.notify, signum)

        try:
            signal.signal(sig, handler)
        except (ValueError, OSError) as e:
            raise SignalRegistrationError(f"Failed to register handler for {sig.name}: {e}") from e
