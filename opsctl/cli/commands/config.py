"""
Configuration Commands

The ``config`` family: a parent command that lists its children, plus
``config show`` and ``config validate``.
"""

import click

from opsctl.cli.command import Command
from opsctl.config import Settings, dump_settings, load_settings
from opsctl.exceptions import ConfigError


class ConfigCommand(Command):
    """Inspect and validate opsctl configuration

    Usage: opsctl config <subcommand> [options]
    """

    def __init__(self, ui, registry):
        super().__init__(ui)
        self.registry = registry

    def run(self, args):
        self.ui.output("Usage: opsctl config <subcommand> [options]")
        self.ui.output("")
        self.ui.output("Subcommands:")
        for descriptor in self.registry.subcommands("config"):
            self.ui.output(f"    {descriptor.name.split(' ')[-1]:<12}{descriptor.synopsis}")
        # A bare parent invocation is a usage error
        return 1


class ConfigShowCommand(Command):
    """Prints the effective settings as YAML"""

    def __init__(self, ui, settings: Settings):
        super().__init__(ui)
        self.settings = settings

    def run(self, args):
        for line in dump_settings(self.settings).splitlines():
            self.ui.output(line)
        return 0


@click.command(name="validate", add_help_option=False)
@click.argument("paths", nargs=-1, required=True, type=click.Path())
def validate_options(paths):
    """Option schema for config validate."""


class ConfigValidateCommand(Command):
    """Validates one or more settings files

    Usage: opsctl config validate PATH...
    """

    def run(self, args):
        try:
            ctx = validate_options.make_context("opsctl config validate", list(args))
        except click.ClickException as e:
            self.ui.error(e.format_message())
            return 1

        for path in ctx.params["paths"]:
            try:
                load_settings(path)
            except ConfigError as e:
                self.ui.error(str(e))
                return 1

        self.ui.output("Configuration is valid!")
        return 0


def register_config_commands(registry, ctx):
    """Register the config command family"""

    @registry.command("config", synopsis="Inspect and validate opsctl configuration")
    def config_factory():
        return ConfigCommand(ctx.ui, registry)

    @registry.command("config show", synopsis="Prints the effective settings as YAML")
    def config_show_factory():
        return ConfigShowCommand(ctx.ui, ctx.settings)

    @registry.command("config validate", synopsis="Validates one or more settings files")
    def config_validate_factory():
        return ConfigValidateCommand(ctx.ui)
