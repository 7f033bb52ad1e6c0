"""
Typer Application Entry Point

Global options are parsed here; everything from the first command token on is
handed to the dispatcher untouched.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from opsctl import __version__
from opsctl.config import load_settings
from opsctl.context import CommandContext, create_context
from opsctl.exceptions import ConfigError, SignalRegistrationError
from .commands import register_all_commands
from .dispatcher import Dispatcher
from .registry import CommandRegistry
from .shell import InteractiveShell

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

app = typer.Typer(
    help="opsctl - operational command line",
    add_completion=False,
    rich_markup_mode="rich",
)
err_console = Console(stderr=True)


def build_registry(ctx: CommandContext) -> CommandRegistry:
    """Register every built-in command and freeze the table."""
    registry = CommandRegistry()
    register_all_commands(registry, ctx)
    registry.freeze()
    logger.debug(f"Registered {len(registry)} commands")
    return registry


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, force=True)


async def run_cli(argv: List[str], ctx: CommandContext, interactive: bool = False) -> int:
    """Dispatch argv (or run the interactive shell) inside the event loop."""
    registry = build_registry(ctx)
    dispatcher = Dispatcher(registry, ctx.ui)
    if interactive:
        shell = InteractiveShell(dispatcher, ctx.broadcaster, history_file=ctx.settings.history_file)
        return await shell.run()
    return await dispatcher.dispatch(argv)


@app.command(context_settings={
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
})
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", envvar="OPSCTL_CONFIG", help="Settings file (YAML)"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Start an interactive shell"),
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version"),
):
    """
    Run an opsctl command.

    Examples:
        opsctl version
        opsctl config show
        opsctl wait --timeout 30
    """
    if version:
        typer.echo(f"opsctl v{__version__}")
        raise typer.Exit()

    try:
        settings = load_settings(config)
    except ConfigError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    configure_logging("DEBUG" if verbose else settings.log_level)
    context = create_context(settings)

    try:
        exit_code = asyncio.run(run_cli(list(ctx.args), context, interactive=interactive))
    except SignalRegistrationError as e:
        logger.critical(f"Cannot receive shutdown signals: {e}")
        err_console.print(f"[red]Cannot receive shutdown signals: {e}[/red]")
        raise typer.Exit(code=1)

    raise typer.Exit(code=exit_code)


def run() -> None:
    """Console script entry point."""
    app(prog_name="opsctl")


if __name__ == "__main__":
    run()
