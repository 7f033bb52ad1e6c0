"""
CLI Commands Module

Built-in commands, grouped by family.
"""

from .config import register_config_commands
from .version import register_version_commands
from .wait import register_wait_commands


def register_all_commands(registry, ctx):
    """Register all built-in commands with the given registry.

    Every factory closes over ``ctx`` so they all share one UI sink and one
    shutdown broadcaster.
    """
    register_version_commands(registry, ctx)
    register_wait_commands(registry, ctx)
    register_config_commands(registry, ctx)
