"""Tests for the lazy command registry."""

import pytest

from opsctl.cli.command import Command
from opsctl.cli.registry import CommandDescriptor, CommandRegistry
from opsctl.exceptions import (
    CommandConstructionError,
    CommandNotFoundError,
    DuplicateCommandError,
    RegistryFrozenError,
)
from prompt_toolkit.completion import WordCompleter


class EchoCommand(Command):
    """Echoes its arguments"""

    def run(self, args):
        self.ui.output(" ".join(args))
        return 0


class TestRegistration:
    """Test registering factories"""

    def setup_method(self):
        self.registry = CommandRegistry()

    def test_register_returns_descriptor(self, ui):
        """Test registration stores an immutable descriptor"""
        factory = lambda: EchoCommand(ui)
        descriptor = self.registry.register("echo", factory, synopsis="Echo args")

        assert isinstance(descriptor, CommandDescriptor)
        assert descriptor.name == "echo"
        assert descriptor.factory is factory
        assert descriptor.synopsis == "Echo args"
        assert "echo" in self.registry
        assert len(self.registry) == 1
        with pytest.raises(AttributeError):
            descriptor.name = "other"

    def test_registration_does_not_construct(self):
        """Test factories are not invoked at registration time"""
        calls = []
        self.registry.register("lazy", lambda: calls.append(1))

        assert calls == []

    def test_duplicate_name_rejected(self, ui):
        """Test registering a name twice is an error and keeps the first"""
        first = lambda: EchoCommand(ui)
        self.registry.register("echo", first)

        with pytest.raises(DuplicateCommandError) as exc_info:
            self.registry.register("echo", lambda: EchoCommand(ui))

        assert exc_info.value.name == "echo"
        assert self.registry.lookup("echo") is first

    def test_register_after_freeze(self, ui):
        """Test the table is immutable once frozen"""
        self.registry.register("echo", lambda: EchoCommand(ui))
        self.registry.freeze()

        assert self.registry.frozen
        with pytest.raises(RegistryFrozenError):
            self.registry.register("late", lambda: EchoCommand(ui))
        assert "late" not in self.registry

    @pytest.mark.parametrize("name", ["", "   ", " echo", "echo ", "kv  get"])
    def test_invalid_names(self, name, ui):
        """Test malformed names are rejected"""
        with pytest.raises(ValueError):
            self.registry.register(name, lambda: EchoCommand(ui))

    def test_non_callable_factory(self):
        """Test factories must be callable"""
        with pytest.raises(TypeError):
            self.registry.register("echo", "not a factory")

    def test_decorator_registration(self, ui):
        """Test decorator registers and returns the factory"""
        @self.registry.command("echo")
        def echo_factory():
            """Echoes arguments back"""
            return EchoCommand(ui)

        assert self.registry.lookup("echo") is echo_factory
        assert self.registry.descriptor("echo").synopsis == "Echoes arguments back"


class TestLookup:
    """Test exact-match lookup"""

    def setup_method(self):
        self.registry = CommandRegistry()
        self.snapshot = lambda: None
        self.snapshot_save = lambda: None
        self.registry.register("snapshot", self.snapshot)
        self.registry.register("snapshot save", self.snapshot_save)

    def test_hierarchical_names_are_independent(self):
        """Test parent and child names resolve to distinct factories"""
        assert self.registry.lookup("snapshot") is self.snapshot
        assert self.registry.lookup("snapshot save") is self.snapshot_save
        assert self.registry.lookup("snapshot") is not self.registry.lookup("snapshot save")

    @pytest.mark.parametrize("name", [
        "nonexistent",
        "snap",
        "snapshot sav",
        "save",
        "snapshot save now",
        "Snapshot",
        " snapshot",
        "snapshot  save",
        "",
    ])
    def test_not_found(self, name):
        """Test anything but an exact registered name is not found"""
        assert self.registry.lookup(name) is None
        assert name not in self.registry

    @pytest.mark.parametrize("name", [None, 42, ["snapshot"], b"snapshot"])
    def test_lookup_never_raises(self, name):
        """Test lookup tolerates non-string input"""
        assert self.registry.lookup(name) is None
        assert self.registry.descriptor(name) is None

    def test_lookup_has_no_side_effects(self):
        """Test lookup does not construct anything"""
        calls = []
        registry = CommandRegistry()
        registry.register("counted", lambda: calls.append(1))

        for _ in range(3):
            registry.lookup("counted")

        assert calls == []


class TestConstruct:
    """Test construction of commands"""

    def setup_method(self):
        self.registry = CommandRegistry()

    def test_each_call_is_fresh(self, ui):
        """Test every construct call yields a new instance"""
        self.registry.register("echo", lambda: EchoCommand(ui))

        first = self.registry.construct("echo")
        second = self.registry.construct("echo")

        assert isinstance(first, EchoCommand)
        assert first is not second

    def test_shared_ui(self, ui):
        """Test factories can deliberately share one UI sink"""
        self.registry.register("echo", lambda: EchoCommand(ui))

        assert self.registry.construct("echo").ui is self.registry.construct("echo").ui

    def test_unknown_name(self):
        """Test constructing an unregistered name"""
        with pytest.raises(CommandNotFoundError) as exc_info:
            self.registry.construct("missing")

        assert exc_info.value.name == "missing"
        assert str(exc_info.value) == "Unknown command: missing"

    def test_factory_error_is_wrapped(self):
        """Test factory failures surface as construction errors"""
        def failing_factory():
            raise RuntimeError("agent data dir not writable")

        self.registry.register("agent", failing_factory)

        with pytest.raises(CommandConstructionError) as exc_info:
            self.registry.construct("agent")

        error = exc_info.value
        assert error.name == "agent"
        assert isinstance(error.cause, RuntimeError)
        assert error.__cause__ is error.cause
        assert "agent data dir not writable" in str(error)

    def test_factory_returning_non_command(self):
        """Test a factory must return something runnable"""
        self.registry.register("broken", lambda: None)
        self.registry.register("plain", lambda: object())

        with pytest.raises(CommandConstructionError):
            self.registry.construct("broken")
        with pytest.raises(CommandConstructionError):
            self.registry.construct("plain")

    def test_duck_typed_command(self):
        """Test any object with run() is accepted"""
        class Minimal:
            def run(self, args):
                return 0

        self.registry.register("minimal", Minimal)

        assert isinstance(self.registry.construct("minimal"), Minimal)


class TestIntrospection:
    """Test listings and completion"""

    def setup_method(self):
        self.registry = CommandRegistry()
        for name in ["kv", "kv get", "kv put", "version", "snapshot", "snapshot save"]:
            self.registry.register(name, lambda: None, synopsis=f"{name} synopsis")
        self.registry.register("debug", lambda: None, hidden=True)

    def test_names_sorted(self):
        assert self.registry.names() == sorted(self.registry.names())
        assert "debug" in self.registry.names()
        assert "debug" not in self.registry.names(include_hidden=False)
        assert list(self.registry) == self.registry.names()

    def test_subcommands(self):
        """Test children are grouped under their parent name"""
        top = [d.name for d in self.registry.subcommands()]
        kv = [d.name for d in self.registry.subcommands("kv")]

        assert top == ["kv", "snapshot", "version"]
        assert kv == ["kv get", "kv put"]
        assert self.registry.subcommands("version") == []

    def test_descriptor_parent(self):
        assert self.registry.descriptor("kv get").parent == "kv"
        assert self.registry.descriptor("kv").parent is None

    def test_completer(self):
        """Test completer offers visible names with synopses"""
        completer = self.registry.get_completer()

        assert isinstance(completer, WordCompleter)
        assert "kv get" in completer.words
        assert "debug" not in completer.words
        assert completer.meta_dict["kv get"] == "kv get synopsis"


class TestBuiltinCommands:
    """Test the built-in command table"""

    @pytest.mark.asyncio
    async def test_every_command_constructs(self, registry, context, signal_source):
        """Test all names construct with no arguments; only long-running ones subscribe"""
        long_running = {"wait"}

        for name in registry.names():
            before = signal_source.subscriber_count
            command = registry.construct(name)
            assert callable(command.run)
            subscribed = signal_source.subscriber_count - before
            assert subscribed == (1 if name in long_running else 0), name

        context.broadcaster.close_all()

    def test_registry_is_frozen(self, registry):
        assert registry.frozen

    def test_expected_names(self, registry):
        assert registry.names() == ["config", "config show", "config validate", "version", "wait"]

    @pytest.mark.asyncio
    async def test_all_commands_share_ui(self, registry, context):
        """Test the process-wide UI sink is handed to every command"""
        for name in registry.names():
            assert registry.construct(name).ui is context.ui

        context.broadcaster.close_all()
