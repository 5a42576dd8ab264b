"""Configuration manager for loading and saving podplay config."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from podplay.config.schema import GlobalConfig
from podplay.utils.errors import InvalidConfigError
from podplay.utils.paths import get_config_dir, get_config_file

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages the podplay configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"

    def load_config(self) -> GlobalConfig:
        """Load and validate global configuration.

        A missing file is created with defaults.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            config = GlobalConfig()
            self.save_config(config)
            return config

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def set_value(self, key: str, value: str) -> GlobalConfig:
        """Set a single configuration value and save it.

        Args:
            key: Dotted key, e.g. ``log_level`` or ``player.keyboard_skip_seconds``
            value: Raw value; YAML scalars are parsed (``true``, ``5``, ``0.3``)

        Returns:
            The updated, validated configuration

        Raises:
            InvalidConfigError: If the key is unknown or the value doesn't validate
        """
        data = self.load_config().model_dump(mode="json")

        parts = key.split(".")
        target: dict[str, Any] = data
        for part in parts[:-1]:
            nested = target.get(part)
            if not isinstance(nested, dict):
                raise InvalidConfigError(f"Unknown config key: {key}")
            target = nested

        if parts[-1] not in target or isinstance(target[parts[-1]], dict):
            raise InvalidConfigError(f"Unknown config key: {key}")

        try:
            target[parts[-1]] = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {e}") from e

        try:
            config = GlobalConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {e}") from e

        self.save_config(config)
        logger.debug(f"Config {key} set to {target[parts[-1]]!r}")
        return config
