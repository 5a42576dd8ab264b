"""Filesystem locations used by podplay.

Set ``PODPLAY_HOME`` to keep config, state and logs under one directory
instead of the platform defaults.
"""

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir, user_log_dir

APP_NAME = "podplay"
HOME_ENV_VAR = "PODPLAY_HOME"


def _home_override() -> Path | None:
    home = os.environ.get(HOME_ENV_VAR)
    return Path(home).expanduser() if home else None


def get_config_dir() -> Path:
    """Get the configuration directory (XDG config dir on Linux)."""
    home = _home_override()
    if home is not None:
        return home / "config"
    return Path(user_config_dir(APP_NAME))


def get_data_dir() -> Path:
    """Get the data directory holding persisted player state."""
    home = _home_override()
    if home is not None:
        return home / "data"
    return Path(user_data_dir(APP_NAME))


def get_config_file() -> Path:
    return get_config_dir() / "config.yaml"


def get_state_file() -> Path:
    return get_data_dir() / "state.json"


def get_log_file() -> Path:
    """Get the default log file, used by the terminal UI."""
    home = _home_override()
    if home is not None:
        return home / "logs" / "podplay.log"
    return Path(user_log_dir(APP_NAME)) / "podplay.log"
