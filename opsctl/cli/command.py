"""
Command capability

Anything with a ``run(args) -> int`` method is a command. ``run`` may be a
coroutine function; the dispatcher awaits it. Long-running commands should
be async so the event loop can deliver shutdown signals while they wait.
"""

from typing import Awaitable, Callable, List, Union

from opsctl.ui import Ui

RunResult = Union[int, None, Awaitable[Union[int, None]]]


class Command:
    """Base class for opsctl commands"""

    def __init__(self, ui: Ui):
        self.ui = ui

    def run(self, args: List[str]) -> RunResult:
        raise NotImplementedError

    def synopsis(self) -> str:
        doc = (self.__class__.__doc__ or "").strip()
        return doc.splitlines()[0] if doc else ""

    def help(self) -> str:
        return (self.__class__.__doc__ or "").strip()


CommandFactory = Callable[[], Command]
