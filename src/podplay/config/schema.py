"""Configuration schema models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
SortOption = Literal["date-desc", "date-asc"]

DEFAULT_FEED_URL = "https://rss.buzzsprout.com/793019.rss"


class PlayerConfig(BaseModel):
    """Audio player behaviour."""

    autoplay: bool = True  # Start playing as soon as an episode is loaded
    initial_volume: float = Field(default=1.0, ge=0.0, le=1.0)
    unmute_volume: float = Field(default=0.5, gt=0.0, le=1.0)
    completion_threshold: float = Field(default=0.95, gt=0.0, le=1.0)

    # Keyboard and on-screen buttons skip by different amounts
    keyboard_skip_seconds: float = Field(default=10, gt=0)
    button_skip_seconds: float = Field(default=15, gt=0)


class ViewConfig(BaseModel):
    """Episode list behaviour."""

    page_size: int = Field(default=10, ge=1)
    default_sort: SortOption = "date-desc"
    show_played: bool = False
    recently_played_limit: int = Field(default=5, ge=0)
    scroll_max_attempts: int = Field(default=20, ge=1)
    scroll_save_interval_ms: int = Field(default=300, ge=0)


class GlobalConfig(BaseModel):
    """Global podplay configuration."""

    version: str = "1"
    feed_url: str = DEFAULT_FEED_URL
    fallback_title: str = "Dev Talks"
    feed_timeout_seconds: int = Field(default=30, ge=1)
    log_level: LogLevel = "INFO"

    player: PlayerConfig = Field(default_factory=PlayerConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
