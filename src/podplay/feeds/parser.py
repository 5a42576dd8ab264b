"""RSS feed parser using feedparser."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import feedparser
import requests

from podplay.feeds.models import Episode, PodcastFeed
from podplay.utils.errors import (
    FeedFetchError,
    FeedParseError,
    NetworkConnectionError,
    NetworkError,
    NetworkTimeoutError,
)
from podplay.utils.retry import RetryConfig, with_network_retry

logger = logging.getLogger(__name__)

USER_AGENT = "podplay/0.1 (+https://github.com/podplay/podplay)"


class RSSParser:
    """Fetches an RSS feed and maps its items to a flat episode list."""

    def __init__(
        self,
        timeout: int = 30,
        fallback_title: str = "Podcast",
        retry_config: RetryConfig | None = None,
    ) -> None:
        """Initialize the RSS parser.

        Args:
            timeout: HTTP request timeout in seconds.
            fallback_title: Podcast title used when the feed has none.
            retry_config: Retry behaviour for network failures.
        """
        self.timeout = timeout
        self.fallback_title = fallback_title
        self.retry_config = retry_config

    def fetch(self, url: str) -> PodcastFeed:
        """Download and parse a feed.

        Args:
            url: RSS feed URL

        Returns:
            The parsed feed

        Raises:
            FeedFetchError: If the feed can't be downloaded
            FeedParseError: If the document isn't a usable feed
        """
        logger.info(f"Fetching feed: {url}")
        download = with_network_retry(config=self.retry_config)(self._download)
        try:
            content = download(url)
        except NetworkError as e:
            raise FeedFetchError(f"Failed to fetch podcast feed: {e}") from e

        return self.parse(content)

    async def fetch_async(self, url: str) -> PodcastFeed:
        """Same as :meth:`fetch`, run in a worker thread."""
        return await asyncio.to_thread(self.fetch, url)

    def _download(self, url: str) -> bytes:
        try:
            response = requests.get(
                url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise NetworkTimeoutError(f"Timed out fetching {url}") from e
        except requests.ConnectionError as e:
            raise NetworkConnectionError(f"Could not connect to {url}: {e}") from e
        except requests.HTTPError as e:
            raise FeedFetchError(
                f"Failed to fetch podcast feed (HTTP {e.response.status_code})"
            ) from e
        except requests.RequestException as e:
            raise FeedFetchError(f"Failed to fetch podcast feed: {e}") from e
        return response.content

    def parse(self, content: bytes | str) -> PodcastFeed:
        """Parse a feed document.

        Episode ids come from the item guid, falling back to
        ``episode-<index>`` when the guid is missing or already taken.

        Raises:
            FeedParseError: If the document has no channel and no items
        """
        parsed = feedparser.parse(content)

        if parsed.bozo and not parsed.entries and not parsed.feed:
            raise FeedParseError(f"Feed parse error: {parsed.get('bozo_exception')}")

        channel = parsed.feed
        feed_image = _image_href(channel)

        episodes: list[Episode] = []
        seen: set[str] = set()
        for index, entry in enumerate(parsed.entries):
            episode_id = entry.get("id") or ""
            if not episode_id or episode_id in seen:
                episode_id = f"episode-{index}"
                suffix = 1
                # a real guid may already look like a positional id
                while episode_id in seen:
                    episode_id = f"episode-{index}-{suffix}"
                    suffix += 1
            seen.add(episode_id)

            episodes.append(
                Episode(
                    id=episode_id,
                    title=entry.get("title", ""),
                    description=_description(entry),
                    pub_date=_iso_date(entry.get("published_parsed")),
                    duration=entry.get("itunes_duration") or None,
                    audio_url=_enclosure_url(entry),
                    image_url=_image_href(entry) or feed_image,
                    link=entry.get("link") or None,
                )
            )

        logger.info(f"Parsed {len(episodes)} episodes")
        return PodcastFeed(
            title=channel.get("title") or self.fallback_title,
            description=channel.get("subtitle") or channel.get("description", ""),
            image_url=feed_image,
            episodes=episodes,
        )


def _description(entry: Any) -> str:
    for content in entry.get("content", []):
        if content.get("value"):
            return content["value"]
    return entry.get("summary", "")


def _enclosure_url(entry: Any) -> str:
    for enclosure in entry.get("enclosures", []):
        href = enclosure.get("href") or enclosure.get("url")
        if href:
            return href
    return ""


def _image_href(node: Any) -> str | None:
    image = node.get("image")
    if image and image.get("href"):
        return image["href"]
    return None


def _iso_date(published_parsed: Any) -> str:
    if not published_parsed:
        return ""
    return datetime(*published_parsed[:6], tzinfo=timezone.utc).isoformat()
