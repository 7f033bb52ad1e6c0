"""Shutdown notification for long-running commands."""

from .broadcaster import ShutdownBroadcaster, ShutdownChannel, relay_signals
from .models import ShutdownEvent
from .signals import DEFAULT_SIGNALS, OSSignalSource, SignalSource

__all__ = [
    "ShutdownBroadcaster",
    "ShutdownChannel",
    "ShutdownEvent",
    "SignalSource",
    "OSSignalSource",
    "DEFAULT_SIGNALS",
    "relay_signals",
]
