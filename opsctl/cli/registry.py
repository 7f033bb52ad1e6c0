"""
Command Registry

Maps command names to zero-argument factories. Nothing is constructed at
registration time; a command object only exists once ``construct`` is called
for its name. Names may contain spaces ("config show") to form command
families, but every name is an independent entry matched exactly.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from prompt_toolkit.completion import WordCompleter

from opsctl.exceptions import (
    CommandConstructionError,
    CommandNotFoundError,
    DuplicateCommandError,
    RegistryFrozenError,
)
from .command import Command, CommandFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandDescriptor:
    """A registered command name and its factory."""

    name: str
    factory: CommandFactory
    synopsis: str = ""
    hidden: bool = False

    @property
    def parent(self) -> Optional[str]:
        """Name of the enclosing command family, if any."""
        if " " not in self.name:
            return None
        return self.name.rsplit(" ", 1)[0]


class CommandRegistry:
    """Lazy command table for opsctl"""

    def __init__(self):
        self._commands: Dict[str, CommandDescriptor] = {}
        self._frozen = False

    def register(self, name: str, factory: CommandFactory, synopsis: str = "",
                 hidden: bool = False) -> CommandDescriptor:
        """Register a factory under a command name.

        Args:
            name: Command name, words separated by single spaces
            factory: Zero-argument callable returning a Command
            synopsis: One-line description for command listings
            hidden: Leave out of listings and completion

        Raises:
            DuplicateCommandError: If the name is already registered
            RegistryFrozenError: If the registry has been frozen
        """
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{name}': registry is frozen")
        if not isinstance(name, str) or not name.strip() or name != " ".join(name.split()):
            raise ValueError(f"Invalid command name: {name!r}")
        if not callable(factory):
            raise TypeError(f"Factory for '{name}' is not callable")
        if name in self._commands:
            raise DuplicateCommandError(name)

        descriptor = CommandDescriptor(name=name, factory=factory, synopsis=synopsis, hidden=hidden)
        self._commands[name] = descriptor
        logger.debug(f"Registered command: {name}")
        return descriptor

    def command(self, name: str, synopsis: str = "", hidden: bool = False):
        """
        Decorator form of ``register``.

        Example:
            @registry.command("version", synopsis="Prints the version")
            def version_factory():
                return VersionCommand(ui)
        """
        def decorator(factory: CommandFactory) -> CommandFactory:
            doc = (factory.__doc__ or "").strip()
            self.register(name, factory, synopsis=synopsis or doc.split("\n")[0], hidden=hidden)
            return factory
        return decorator

    def freeze(self) -> None:
        """Stop accepting registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name) -> Optional[CommandFactory]:
        """Return the factory registered under exactly ``name``, or None."""
        if not isinstance(name, str):
            return None
        descriptor = self._commands.get(name)
        return descriptor.factory if descriptor else None

    def descriptor(self, name: str) -> Optional[CommandDescriptor]:
        if not isinstance(name, str):
            return None
        return self._commands.get(name)

    def construct(self, name: str) -> Command:
        """Build a fresh command instance.

        Raises:
            CommandNotFoundError: If no command is registered under ``name``
            CommandConstructionError: If the factory fails or returns a non-command
        """
        factory = self.lookup(name)
        if factory is None:
            raise CommandNotFoundError(name)

        try:
            command = factory()
        except Exception as e:
            logger.warning(f"Factory for '{name}' failed: {e}")
            raise CommandConstructionError(name, e) from e

        if command is None or not callable(getattr(command, "run", None)):
            raise CommandConstructionError(name, message=f"factory returned {type(command).__name__}, not a command")

        logger.debug(f"Constructed command: {name}")
        return command

    def names(self, include_hidden: bool = True) -> List[str]:
        return sorted(d.name for d in self._commands.values() if include_hidden or not d.hidden)

    def descriptors(self) -> List[CommandDescriptor]:
        return [self._commands[name] for name in sorted(self._commands)]

    def subcommands(self, parent: Optional[str] = None, include_hidden: bool = False) -> List[CommandDescriptor]:
        """Direct children of ``parent``, or top-level commands when None."""
        return [
            d for d in self.descriptors()
            if d.parent == parent and (include_hidden or not d.hidden)
        ]

    def get_completer(self) -> WordCompleter:
        """Get a prompt_toolkit completer with all visible command names"""
        words = []
        meta_dict = {}
        for descriptor in self.descriptors():
            if descriptor.hidden:
                continue
            words.append(descriptor.name)
            meta_dict[descriptor.name] = descriptor.synopsis

        return WordCompleter(
            words=words,
            meta_dict=meta_dict,
            sentence=True,  # names contain spaces
        )

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
