"""opsctl - command registry and shutdown signalling for an operational CLI."""

__version__ = "0.1.0"

__all__ = ["__version__"]
