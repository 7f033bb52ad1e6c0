"""
opsctl CLI - Command Line Interface Module

- Lazy command registration and construction
- argv dispatch with exit-code mapping
- Interactive shell with completion and history
"""

from .command import Command, CommandFactory
from .dispatcher import Dispatcher
from .registry import CommandDescriptor, CommandRegistry

__all__ = [
    'Command',
    'CommandFactory',
    'CommandDescriptor',
    'CommandRegistry',
    'Dispatcher',
]
