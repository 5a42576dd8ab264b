"""Utility functions and helpers for podplay."""

from podplay.utils.errors import (
    ConfigError,
    FeedError,
    FeedFetchError,
    FeedParseError,
    InvalidConfigError,
    MediaLoadError,
    NetworkConnectionError,
    NetworkError,
    NetworkTimeoutError,
    PlaybackRejectedError,
    PodplayError,
    StorageError,
    TransportError,
)
from podplay.utils.paths import (
    get_config_dir,
    get_config_file,
    get_data_dir,
    get_log_file,
    get_state_file,
)

__all__ = [
    # Errors
    "PodplayError",
    "ConfigError",
    "InvalidConfigError",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
    "NetworkError",
    "NetworkConnectionError",
    "NetworkTimeoutError",
    "StorageError",
    "TransportError",
    "MediaLoadError",
    "PlaybackRejectedError",
    # Paths
    "get_config_dir",
    "get_data_dir",
    "get_config_file",
    "get_state_file",
    "get_log_file",
]
