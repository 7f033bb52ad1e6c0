"""Exception types for opsctl."""


class OpsctlError(Exception):
    """Base class for all opsctl errors."""


class CommandNotFoundError(OpsctlError):
    """No command is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown command: {name}")


class CommandConstructionError(OpsctlError):
    """A command factory failed to produce a command."""

    def __init__(self, name: str, cause: BaseException | None = None, message: str | None = None):
        self.name = name
        self.cause = cause
        if message is None:
            message = str(cause) if cause is not None else "construction failed"
        super().__init__(f"Error initializing command '{name}': {message}")


class DuplicateCommandError(OpsctlError):
    """A command name was registered twice."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Command already registered: {name}")


class RegistryFrozenError(OpsctlError):
    """The registry no longer accepts registrations."""


class SignalRegistrationError(OpsctlError):
    """Installing a process signal handler failed."""


class ConfigError(OpsctlError):
    """Settings could not be loaded or validated."""


class ChannelClosedError(OpsctlError):
    """A shutdown channel was closed while (or before) it was read."""
