"""Custom exceptions for podplay."""


class PodplayError(Exception):
    """Base exception for all podplay errors."""

    pass


class ConfigError(PodplayError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class FeedError(PodplayError):
    """Feed ingestion errors.

    Any subclass means the whole episode list is unavailable.
    """

    pass


class FeedFetchError(FeedError):
    """The feed could not be downloaded."""

    pass


class FeedParseError(FeedError):
    """RSS feed parsing errors."""

    pass


class NetworkError(PodplayError):
    """Network-related errors."""

    pass


class NetworkConnectionError(NetworkError):
    """Connection failures."""

    pass


class NetworkTimeoutError(NetworkError):
    """Request timeout."""

    pass


class StorageError(PodplayError):
    """Local state could not be written."""

    pass


class TransportError(PodplayError):
    """Audio transport failures."""

    pass


class MediaLoadError(TransportError):
    """Audio resource unreachable or unsupported."""

    pass


class PlaybackRejectedError(TransportError):
    """The environment refused to start playback."""

    pass
