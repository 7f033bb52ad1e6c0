"""
Version Command
"""

from opsctl.cli.command import Command


class VersionCommand(Command):
    """Prints the opsctl version"""

    def __init__(self, ui, version: str):
        super().__init__(ui)
        self.version = version

    def run(self, args):
        self.ui.output(f"opsctl v{self.version}")
        return 0


def register_version_commands(registry, ctx):
    """Register the version command"""

    @registry.command("version", synopsis="Prints the opsctl version")
    def version_factory():
        return VersionCommand(ctx.ui, ctx.version)
