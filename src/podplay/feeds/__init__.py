"""Feed ingestion and episode list view model."""

from podplay.feeds.filtering import EpisodeQuery, extract_keywords, paginate, total_pages
from podplay.feeds.models import Episode, PodcastFeed
from podplay.feeds.parser import RSSParser

__all__ = [
    "Episode",
    "PodcastFeed",
    "RSSParser",
    "EpisodeQuery",
    "extract_keywords",
    "paginate",
    "total_pages",
]
