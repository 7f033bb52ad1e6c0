"""Data models for shutdown notifications."""

import signal
from datetime import datetime, timezone
from typing import Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ShutdownEvent(BaseModel):
    """A single "shut down now" notification.

    Consumers treat it as a unit value; the fields exist for logging.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    signal_name: str = Field(description="Name of the signal that triggered the event (e.g. 'SIGINT')")
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_signal(cls, signum: Union[signal.Signals, int]) -> "ShutdownEvent":
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        return cls(signal_name=name)
