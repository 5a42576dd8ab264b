"""Configuration management for podplay."""

from podplay.config.manager import ConfigManager
from podplay.config.schema import GlobalConfig, PlayerConfig, ViewConfig

__all__ = ["ConfigManager", "GlobalConfig", "PlayerConfig", "ViewConfig"]
