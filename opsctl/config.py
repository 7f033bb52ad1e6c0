# config.py
import logging
import signal
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# The OS never lets a process handle these.
UNCATCHABLE_SIGNALS = frozenset(name for name in ("SIGKILL", "SIGSTOP") if hasattr(signal, name))


class Settings(BaseModel):
    """Process-wide settings for opsctl."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="WARNING", description="Root log level")
    shutdown_signals: List[str] = Field(
        default_factory=lambda: ["SIGINT", "SIGTERM"],
        description="Signals that request a graceful shutdown",
    )
    signal_buffer_size: int = Field(default=4, ge=1, description="Pending signals kept per shutdown channel")
    history_file: Optional[Path] = Field(default=None, description="Interactive shell history file")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("shutdown_signals")
    @classmethod
    def _check_signals(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one shutdown signal is required")
        names = []
        for name in value:
            name = name.upper()
            if not name.startswith("SIG"):
                name = f"SIG{name}"
            if not isinstance(getattr(signal, name, None), signal.Signals):
                raise ValueError(f"unknown signal: {name}")
            if name in UNCATCHABLE_SIGNALS:
                raise ValueError(f"{name} cannot be caught")
            names.append(name)
        return names

    def signal_numbers(self) -> List[signal.Signals]:
        """Resolve the configured signal names."""
        return [signal.Signals[name] for name in self.shutdown_signals]


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Settings file; None returns the defaults

    Returns:
        Validated Settings

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    if path is None:
        return Settings()

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must be a mapping, got {type(data).__name__}")

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e

    logger.debug(f"Loaded settings from {config_path}")
    return settings


def dump_settings(settings: Settings) -> str:
    """Render settings as YAML."""
    data = settings.model_dump(mode="json")
    return yaml.dump(data, default_flow_style=False, indent=2, sort_keys=True)
