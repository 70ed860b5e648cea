"""
Global configuration for the dla CLI.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Union

import yaml

from dla_cli.core.errors import ConfigError
from dla_cli.core.streaming.framer import DEFAULT_MAX_LINE_BYTES
from dla_cli.core.streaming.tags import DEFAULT_SEPARATOR
from dla_cli.utils.colors import DEFAULT_PALETTE_NAMES, color_code

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dla-config.yml"

SWARM_SERVICE_NAME_KEY = "com.docker.swarm.service.name"
SWARM_TASK_NAME_KEY = "com.docker.swarm.task.name"


@dataclass
class GlobalConfig:
    """Global configuration settings."""
    separator: str = DEFAULT_SEPARATOR
    palette: List[str] = field(default_factory=lambda: list(DEFAULT_PALETTE_NAMES))
    error_color: str = "bright_red"
    service_label: str = SWARM_SERVICE_NAME_KEY
    task_label: str = SWARM_TASK_NAME_KEY
    docker_command: str = "docker"
    tail: str = ""
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES

    def validate(self) -> None:
        """
        Check the settings for values the engine cannot work with.

        Raises:
            ConfigError: If a setting is invalid
        """
        if not self.palette:
            raise ConfigError("palette must list at least one color")
        for name in list(self.palette) + [self.error_color]:
            color_code(name)
        if self.max_line_bytes <= 0:
            raise ConfigError("max_line_bytes must be positive")


ENV_OVERRIDES = {
    "DLA_SEPARATOR": "separator",
    "DLA_TAIL": "tail",
    "DLA_DOCKER": "docker_command",
    "DLA_ERROR_COLOR": "error_color",
}


def load_global_config(path: Optional[Union[str, Path]] = None) -> GlobalConfig:
    """
    Load global configuration from file or use defaults.

    Environment variables listed in ENV_OVERRIDES take precedence over the
    file.

    Args:
        path: Configuration file; defaults to dla-config.yml in the working directory

    Raises:
        ConfigError: If an explicitly given file is missing, or any file is malformed
    """
    config_file = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
    values = {}

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_file} must be a mapping")

        known = {f.name for f in fields(GlobalConfig)}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            values[key] = value
        logger.debug(f"Loaded config from {config_file}")
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_file}")

    for env_name, key in ENV_OVERRIDES.items():
        if env_name in os.environ:
            values[key] = os.environ[env_name]

    try:
        config = GlobalConfig(**values)
        config.max_line_bytes = int(config.max_line_bytes)
        config.palette = [str(name) for name in config.palette]
        config.tail = "" if config.tail is None else str(config.tail)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    config.validate()
    return config
