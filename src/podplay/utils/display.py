"""Formatting helpers for terminal display."""

import html
import math
import re

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def format_time(seconds: float | None) -> str:
    """Format a playback position as M:SS.

    Non-finite or missing values render as 0:00.

    Examples:
        >>> format_time(75.4)
        '1:15'
        >>> format_time(3725)
        '62:05'
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def parse_duration(value: str | int | float | None) -> int | None:
    """Parse an itunes:duration value into whole seconds.

    Accepts "H:MM:SS", "MM:SS", or a plain number of seconds.

    Returns:
        Duration in seconds, or None when the value can't be parsed
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value) if value >= 0 else None

    text = value.strip()
    if not text:
        return None

    parts = text.split(":")
    if len(parts) > 3:
        return None

    total = 0
    try:
        for part in parts:
            number = float(part)
            if number < 0:
                return None
            total = total * 60 + number
    except ValueError:
        return None
    return int(total)


def format_duration(value: str | int | float | None) -> str:
    """Format an episode duration for listings ("1h 5m", "42m 7s").

    Returns an empty string when the duration is unknown.
    """
    total = parse_duration(value)
    if total is None:
        return ""
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m {secs}s"


def strip_html(text: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    stripped = _TAG_RE.sub(" ", text or "")
    return _WHITESPACE_RE.sub(" ", html.unescape(stripped)).strip()


def truncate_text(text: str, max_length: int = 200) -> str:
    """Truncate text to max_length characters, adding an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3].rstrip() + "..."
