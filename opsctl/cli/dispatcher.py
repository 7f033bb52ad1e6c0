"""
Dispatcher

Turns argv into a registered command name, constructs the command and runs
it, mapping failures to exit codes.
"""

import inspect
import logging
from typing import List, Optional, Sequence, Tuple

from opsctl.exceptions import (
    CommandConstructionError,
    CommandNotFoundError,
    SignalRegistrationError,
)
from opsctl.ui import Ui
from .registry import CommandRegistry

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_ERROR = 1

HELP_FLAGS = ("-h", "--help")


class Dispatcher:
    """Resolves and runs commands from a registry"""

    def __init__(self, registry: CommandRegistry, ui: Ui):
        self.registry = registry
        self.ui = ui

    def resolve(self, argv: Sequence[str]) -> Tuple[Optional[str], List[str]]:
        """Find the longest registered name formed by leading argv tokens.

        Only whole tokens are joined, and each candidate is an exact lookup,
        so "config show" is found for ``["config", "show", "-x"]`` while
        ``["conf"]`` matches nothing.

        Returns:
            (name, remaining args), or (None, argv) if nothing matches
        """
        argv = list(argv)
        for size in range(len(argv), 0, -1):
            candidate = " ".join(argv[:size])
            if candidate in self.registry:
                return candidate, argv[size:]
        return None, argv

    async def dispatch(self, argv: Sequence[str]) -> int:
        """Run the command selected by argv and return its exit code.

        Raises:
            SignalRegistrationError: If a long-running command could not
                subscribe to process signals
        """
        argv = list(argv)
        if not argv:
            self.render_command_list()
            return EXIT_NOT_FOUND

        name, args = self.resolve(argv)
        if name is None:
            logger.warning(f"Unknown command: {argv[0]}")
            self.ui.error(f"Unknown command: {argv[0]}")
            self.render_command_list()
            return EXIT_NOT_FOUND

        try:
            command = self.registry.construct(name)
        except CommandNotFoundError as e:
            self.ui.error(str(e))
            return EXIT_NOT_FOUND
        except CommandConstructionError as e:
            if isinstance(e.cause, SignalRegistrationError):
                raise e.cause
            self.ui.error(str(e))
            return EXIT_ERROR

        if len(args) == 1 and args[0] in HELP_FLAGS and hasattr(command, "help"):
            self.ui.output(command.help())
            return 0

        logger.debug(f"Running command: {name} {args}")
        result = command.run(args)
        if inspect.isawaitable(result):
            result = await result
        return self._exit_code(name, result)

    def _exit_code(self, name: str, result) -> int:
        if result is None:
            return 0
        if isinstance(result, bool) or not isinstance(result, int):
            logger.warning(f"Command '{name}' returned {result!r}, expected an exit code")
            return 0 if result else EXIT_ERROR
        return result

    def render_command_list(self, parent: Optional[str] = None) -> None:
        """Print visible commands (or the children of ``parent``)."""
        descriptors = self.registry.subcommands(parent)
        self.ui.output("Usage: opsctl [--version] [--help] <command> [<args>]")
        self.ui.output("")
        self.ui.output("Available commands are:")
        width = max((len(d.name) for d in descriptors), default=0) + 4
        for descriptor in descriptors:
            self.ui.output(f"    {descriptor.name:<{width}}{descriptor.synopsis}")
