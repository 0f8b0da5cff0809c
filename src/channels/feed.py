"""Channel syndication feed retrieval and lightweight entry parsing."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from src.ingestion.config import Settings
from src.ingestion.errors import FeedUnavailableError
from src.ingestion.models import ParsedVideo

from .http_client import HttpError, TextClient

LOGGER = logging.getLogger(__name__)

# Applied in order, so "&amp;quot;" ends up as a plain quote.
_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def decode_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def extract_tag(xml: str, tag: str) -> Optional[str]:
    pattern = re.compile(
        rf"<{re.escape(tag)}[^>]*>([\s\S]*?)</{re.escape(tag)}>", re.IGNORECASE
    )
    match = pattern.search(xml)
    if match is None:
        return None
    return match.group(1).strip()


def _parse_published(raw: str) -> Optional[datetime]:
    normalized = raw.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def extract_videos(feed_text: str, max_per_channel: int) -> list[ParsedVideo]:
    """Parse up to *max_per_channel* entries from a channel feed, in feed order.

    Entries without a video id, title or a parseable published timestamp
    are skipped. Title and description are entity-decoded.
    """
    videos: list[ParsedVideo] = []
    for entry in feed_text.split("<entry>")[1:]:
        if len(videos) >= max_per_channel:
            break

        video_id = extract_tag(entry, "yt:videoId")
        title = extract_tag(entry, "title")
        description = extract_tag(entry, "media:description") or ""
        published = extract_tag(entry, "published")
        if not video_id or not title or not published:
            continue

        published_at = _parse_published(published)
        if published_at is None:
            continue

        videos.append(
            ParsedVideo(
                video_id=video_id,
                title=decode_entities(title),
                description=decode_entities(description),
                published_at=published_at,
            )
        )
    return videos


class FeedClient:
    def __init__(self, client: TextClient, settings: Optional[Settings] = None) -> None:
        self.client = client
        self.settings = settings or Settings()

    def feed_url(self, channel_id: str) -> str:
        return f"{self.settings.feed_base_url}?{urlencode({'channel_id': channel_id})}"

    def fetch_feed(self, channel_id: str) -> str:
        feed_url = self.feed_url(channel_id)
        try:
            return self.client.request_text(feed_url)
        except HttpError as exc:
            LOGGER.error("Failed to download feed %s: %s", feed_url, exc)
            raise FeedUnavailableError(channel_id) from exc

    def fetch_videos(self, channel_id: str) -> list[ParsedVideo]:
        return extract_videos(
            self.fetch_feed(channel_id), self.settings.max_videos_per_channel
        )
