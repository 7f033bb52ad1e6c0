"""
Wait Command

Long-running command that parks until the process is asked to shut down.
Useful as a supervisor placeholder and for checking signal delivery.
"""

import asyncio
import logging

import click

from opsctl.cli.command import Command
from opsctl.shutdown import ShutdownChannel

logger = logging.getLogger(__name__)

EXIT_TIMEOUT = 2


@click.command(name="wait", add_help_option=False)
@click.option("--timeout", type=click.FloatRange(min=0), default=None,
              help="Give up after this many seconds")
def wait_options(timeout):
    """Option schema for the wait command."""


class WaitCommand(Command):
    """Blocks until an interrupt or termination signal arrives.

    Usage: opsctl wait [--timeout SECONDS]

    Exits 0 on the first shutdown signal and 2 if --timeout elapses first.
    """

    def __init__(self, ui, shutdown_ch: ShutdownChannel):
        super().__init__(ui)
        self.shutdown_ch = shutdown_ch

    async def run(self, args):
        try:
            ctx = wait_options.make_context("opsctl wait", list(args))
        except click.ClickException as e:
            self.ui.error(e.format_message())
            return 1
        timeout = ctx.params["timeout"]

        self.ui.output("Waiting for shutdown signal...")
        try:
            event = await asyncio.wait_for(self.shutdown_ch.get(), timeout)
        except asyncio.TimeoutError:
            self.ui.error(f"No shutdown signal received within {timeout:g}s")
            return EXIT_TIMEOUT

        logger.info(f"wait: received {event.signal_name}")
        self.ui.output("Caught interrupt, shutting down")
        return 0


def register_wait_commands(registry, ctx):
    """Register long-running commands"""

    @registry.command("wait", synopsis="Blocks until the process is asked to shut down")
    def wait_factory():
        return WaitCommand(ctx.ui, ctx.broadcaster.new_shutdown_channel())
