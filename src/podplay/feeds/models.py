"""Data models for podcast episodes and feeds."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from podplay.utils.display import parse_duration, strip_html


class Episode(BaseModel):
    """A single podcast episode as delivered by the feed."""

    id: str
    title: str = ""
    description: str = ""  # HTML
    pub_date: str = ""  # ISO 8601, empty when the feed had none
    duration: str | None = None  # "H:MM:SS", "MM:SS" or seconds
    audio_url: str = ""
    image_url: str | None = None
    link: str | None = None
    pod_link_url: str | None = None

    @property
    def published(self) -> datetime | None:
        """Publication date, or None when missing or unparseable."""
        if not self.pub_date:
            return None
        try:
            published = datetime.fromisoformat(self.pub_date)
        except ValueError:
            return None
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published

    @property
    def duration_seconds(self) -> int | None:
        return parse_duration(self.duration)

    @property
    def plain_description(self) -> str:
        return strip_html(self.description)


class PodcastFeed(BaseModel):
    """A podcast and its episodes."""

    title: str
    description: str = ""
    image_url: str | None = None
    episodes: list[Episode] = Field(default_factory=list)

    def get_episode(self, episode_id: str) -> Episode | None:
        for episode in self.episodes:
            if episode.id == episode_id:
                return episode
        return None
