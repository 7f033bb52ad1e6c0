"""
Interactive Shell

Reads command lines with prompt_toolkit and dispatches each one. The shell is
a long-lived host, so shutdown listeners created by a line are closed once
that line finishes. A command that raises is reported and the shell keeps
reading.

Once a line has installed the process signal handlers they stay installed,
so SIGINT or SIGTERM arriving between lines reaches no listener and is
ignored (the source logs it). Ctrl-C at the prompt is a key press handled by
prompt_toolkit, not a signal.
"""

import logging
import shlex
from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory, InMemoryHistory

from opsctl.exceptions import SignalRegistrationError
from opsctl.shutdown import ShutdownBroadcaster
from .dispatcher import EXIT_ERROR, Dispatcher

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")


class InteractiveShell:
    """REPL over a Dispatcher"""

    def __init__(self, dispatcher: Dispatcher, broadcaster: ShutdownBroadcaster,
                 history_file: Optional[Path] = None, session: Optional[PromptSession] = None):
        self.dispatcher = dispatcher
        self.broadcaster = broadcaster
        self.last_exit_code = 0
        if session is None:
            history = FileHistory(str(history_file)) if history_file else InMemoryHistory()
            session = PromptSession(
                message="opsctl> ",
                completer=dispatcher.registry.get_completer(),
                history=history,
                auto_suggest=AutoSuggestFromHistory(),
            )
        self.session = session

    async def run_line(self, line: str) -> Optional[int]:
        """Dispatch one input line; returns None for blank lines."""
        try:
            argv = shlex.split(line)
        except ValueError as e:
            self.dispatcher.ui.error(f"Parse error: {e}")
            return None
        if not argv:
            return None

        try:
            self.last_exit_code = await self.dispatcher.dispatch(argv)
        except SignalRegistrationError:
            raise
        except Exception as e:
            logger.error(f"Command failed: {line!r}: {e}")
            self.dispatcher.ui.error(f"Error: {e}")
            self.last_exit_code = EXIT_ERROR
        finally:
            self.broadcaster.close_all()
        if self.last_exit_code:
            self.dispatcher.ui.warn(f"exit code {self.last_exit_code}")
        return self.last_exit_code

    async def run(self) -> int:
        """Run until exit/quit or EOF; returns the last command's exit code."""
        self.dispatcher.ui.info("opsctl interactive shell. Type 'exit' to quit.")
        while True:
            try:
                line = await self.session.prompt_async()
            except KeyboardInterrupt:
                self.dispatcher.ui.output("Use 'exit' or Ctrl-D to quit")
                continue
            except EOFError:
                break

            if line.strip() in EXIT_WORDS:
                break
            await self.run_line(line)

        logger.debug("Interactive shell finished")
        return self.last_exit_code
