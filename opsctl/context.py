"""Process-scoped state handed to every command factory."""

from dataclasses import dataclass, field
from typing import Optional

from . import __version__
from .config import Settings
from .shutdown import OSSignalSource, ShutdownBroadcaster, SignalSource
from .ui import ConsoleUi, Ui


@dataclass
class CommandContext:
    """Shared UI sink, shutdown broadcaster and settings for one process."""

    ui: Ui
    broadcaster: ShutdownBroadcaster
    settings: Settings = field(default_factory=Settings)
    version: str = __version__


def create_context(settings: Optional[Settings] = None, ui: Optional[Ui] = None,
                   source: Optional[SignalSource] = None) -> CommandContext:
    """Build the context once at start-up.

    Tests pass a BufferUi and a plain SignalSource so that no terminal or OS
    signal handler is involved.
    """
    settings = settings or Settings()
    if source is None:
        source = OSSignalSource(settings.signal_numbers())
    broadcaster = ShutdownBroadcaster(source, buffer_size=settings.signal_buffer_size)
    return CommandContext(
        ui=ui or ConsoleUi(),
        broadcaster=broadcaster,
        settings=settings,
    )
